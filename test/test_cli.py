import json

from typer.testing import CliRunner

from cli import app

runner = CliRunner()

SNAPSHOT = """- table "Bookings":
  - row "Item A" [kind=a]
  - row "Item B" [kind=b]
  - row "Another A" [kind=a]
"""


def test_filter_writes_payload_to_output(tmp_path):
	snapshot_path = tmp_path / 'snapshot.yml'
	snapshot_path.write_text(SNAPSHOT, encoding='utf-8')
	output = tmp_path / 'rows.json'

	result = runner.invoke(
		app, ['filter', str(snapshot_path), '--role', 'row', '--attr', 'kind=a', '--output', str(output)]
	)

	assert result.exit_code == 0, result.output
	assert [node['text'] for node in json.loads(output.read_text(encoding='utf-8'))] == ['Item A', 'Another A']


def test_filter_rereads_json_output(tmp_path):
	snapshot_path = tmp_path / 'snapshot.yml'
	snapshot_path.write_text(SNAPSHOT, encoding='utf-8')
	rows = tmp_path / 'rows.json'
	items = tmp_path / 'items.json'

	runner.invoke(app, ['filter', str(snapshot_path), '-r', 'row', '-o', str(rows)])
	result = runner.invoke(app, ['filter', str(rows), '--json', '--text-regex', '^item', '-o', str(items)])

	assert result.exit_code == 0, result.output
	assert len(json.loads(items.read_text(encoding='utf-8'))) == 2


def test_filter_unwraps_fenced_tool_output(tmp_path):
	snapshot_path = tmp_path / 'response.md'
	snapshot_path.write_text(f'- Page Snapshot:\n```yaml\n{SNAPSHOT}```\n', encoding='utf-8')
	output = tmp_path / 'table.json'

	result = runner.invoke(app, ['filter', str(snapshot_path), '-r', 'table', '-o', str(output)])

	assert result.exit_code == 0, result.output
	assert json.loads(output.read_text(encoding='utf-8'))[0]['text'] == 'Bookings'


def test_filter_failure_exits_non_zero(tmp_path):
	snapshot_path = tmp_path / 'broken.yml'
	snapshot_path.write_text('table: [unclosed', encoding='utf-8')

	result = runner.invoke(app, ['filter', str(snapshot_path)])

	assert result.exit_code == 1
	assert 'Failed to parse YAML' in result.output


def test_filter_rejects_conflicting_text_options(tmp_path):
	snapshot_path = tmp_path / 'snapshot.yml'
	snapshot_path.write_text(SNAPSHOT, encoding='utf-8')

	result = runner.invoke(app, ['filter', str(snapshot_path), '--text-equals', 'a', '--text-contains', 'b'])

	assert result.exit_code != 0
