import asyncio
from pathlib import Path
from typing import Dict, List, Optional

import typer
from dotenv import load_dotenv

from workflow_snapshot.browser.service import SnapshotCaptureService
from workflow_snapshot.browser.utils import unwrap_snapshot_text
from workflow_snapshot.config import get_log_level
from workflow_snapshot.mcp.service import get_mcp_server
from workflow_snapshot.snapshot.service import SnapshotFilterService
from workflow_snapshot.snapshot.views import (
	ContainsTextMatch,
	EqualsTextMatch,
	RegexTextMatch,
	SnapshotFilter,
	SnapshotFilterInput,
	TextMatch,
)
from workflow_snapshot.utils import setup_logging
from workflow_snapshot.variables.service import VariableStore

load_dotenv()

app = typer.Typer(
	name='workflow-snapshot',
	help='Capture and filter accessibility snapshots for browser workflows.',
	add_completion=False,
	no_args_is_help=True,
)

SOURCE_VARIABLE = 'snapshot'


@app.callback()
def main(debug: bool = typer.Option(False, '--debug', help='Log tool arguments and results.')):
	setup_logging('DEBUG' if debug else get_log_level())


def _parse_attributes(pairs: Optional[List[str]]) -> Optional[Dict[str, str]]:
	if not pairs:
		return None
	attributes = {}
	for pair in pairs:
		key, sep, value = pair.partition('=')
		if not sep or not key.strip():
			raise typer.BadParameter(f"Expected key=value, got '{pair}'", param_hint='--attr')
		attributes[key.strip()] = value.strip()
	return attributes


def _build_text_match(
	equals: Optional[str], contains: Optional[str], regex: Optional[str], flags: Optional[str]
) -> Optional[TextMatch]:
	given = [option for option in (equals, contains, regex) if option is not None]
	if len(given) > 1:
		raise typer.BadParameter('Use only one of --text-equals, --text-contains, --text-regex')
	if equals is not None:
		return EqualsTextMatch(equals=equals)
	if contains is not None:
		return ContainsTextMatch(contains=contains)
	if regex is not None:
		return RegexTextMatch(regex=regex, flags=flags)
	return None


@app.command(name='filter', help='Filter a saved snapshot (YAML) or a previous JSON result by role/text/attributes.')
def filter_command(
	snapshot_path: Path = typer.Argument(
		...,
		exists=True,
		file_okay=True,
		dir_okay=False,
		readable=True,
		help='Snapshot YAML file, or a JSON match list when --json is set.',
	),
	role: Optional[List[str]] = typer.Option(None, '--role', '-r', help='Accessibility role; repeat for several.'),
	text_equals: Optional[str] = typer.Option(None, '--text-equals', help='Accessible name equals (case-insensitive).'),
	text_contains: Optional[str] = typer.Option(None, '--text-contains', help='Accessible name contains (case-insensitive).'),
	text_regex: Optional[str] = typer.Option(None, '--text-regex', help='Regex searched in the lowercased accessible name.'),
	regex_flags: Optional[str] = typer.Option(None, '--regex-flags', help="Regex flags, e.g. 'i'."),
	attr: Optional[List[str]] = typer.Option(None, '--attr', '-a', help='Required attribute as key=value; repeatable.'),
	include_subtree: bool = typer.Option(False, '--include-subtree', help='Include the full subtree of matched nodes.'),
	mode: str = typer.Option('all', '--mode', '-m', help="'first' or 'all'."),
	max_results: Optional[int] = typer.Option(None, '--max-results', min=1, help='Limit the number of matches.'),
	json_source: bool = typer.Option(False, '--json', help='Source is a JSON match list from a previous filter.'),
	output: Optional[Path] = typer.Option(None, '--output', '-o', help='Write the JSON payload to this file.'),
):
	if mode not in ('first', 'all'):
		raise typer.BadParameter("Mode must be 'first' or 'all'", param_hint='--mode')

	source = snapshot_path.read_text(encoding='utf-8')
	if not json_source:
		source = unwrap_snapshot_text(source)

	store = VariableStore({SOURCE_VARIABLE: source})
	params = SnapshotFilterInput(
		variable=SOURCE_VARIABLE,
		sourceKind='json' if json_source else 'raw',
		filter=SnapshotFilter(
			role=role[0] if role and len(role) == 1 else role,
			text=_build_text_match(text_equals, text_contains, text_regex, regex_flags),
			attributes=_parse_attributes(attr),
		),
		includeSubtree=include_subtree,
		mode=mode,
		maxResults=max_results,
	)
	result = SnapshotFilterService(store).run(params)

	if not result.success:
		typer.secho(f'Filter failed ({result.count} matches): {result.reason}', fg=typer.colors.RED)
		raise typer.Exit(code=1)

	if output:
		output.parent.mkdir(parents=True, exist_ok=True)
		output.write_text(result.payload, encoding='utf-8')
		typer.secho(
			f'{result.count} matches saved to: {typer.style(str(output.resolve()), fg=typer.colors.BRIGHT_GREEN, bold=True)}',
			fg=typer.colors.GREEN,
		)
		return

	typer.secho(f'{result.count} matches', fg=typer.colors.GREEN, bold=True, err=True)
	typer.echo(result.payload)


@app.command(name='capture', help="Open a URL and save the page's accessibility snapshot as YAML.")
def capture_command(
	url: str = typer.Argument(..., help='Absolute URL of the page to snapshot.'),
	output: Path = typer.Option(Path('./tmp/snapshot.yml'), '--output', '-o', help='Where to write the snapshot.'),
	headed: bool = typer.Option(False, '--headed', help='Show the browser window.'),
):
	store = VariableStore()
	capture_service = SnapshotCaptureService(store, headless=False if headed else None)

	typer.echo(f'Capturing accessibility snapshot of {typer.style(url, fg=typer.colors.CYAN)}...')
	try:
		result = asyncio.run(capture_service.capture(url, SOURCE_VARIABLE))
	except Exception as e:
		typer.secho(f'Error launching browser: {e}', fg=typer.colors.RED)
		raise typer.Exit(code=1)

	if not result.success:
		typer.secho(f'Capture failed: {result.reason}', fg=typer.colors.RED)
		raise typer.Exit(code=1)

	output.parent.mkdir(parents=True, exist_ok=True)
	output.write_text(store.get(SOURCE_VARIABLE), encoding='utf-8')
	typer.secho(
		f'Snapshot ({result.chars} chars) saved to: {typer.style(str(output.resolve()), fg=typer.colors.BRIGHT_GREEN, bold=True)}',
		fg=typer.colors.GREEN,
	)


@app.command(name='mcp-server', help='Serve the snapshot filter and variable tools over MCP.')
def mcp_server_command(
	transport: str = typer.Option('stdio', '--transport', '-t', help="'stdio' or 'sse'."),
	host: str = typer.Option('0.0.0.0', '--host'),
	port: int = typer.Option(8008, '--port', '-p'),
	max_chars: Optional[int] = typer.Option(None, '--max-chars', min=1, help='Payload ceiling in characters.'),
):
	mcp = get_mcp_server(VariableStore(), max_chars=max_chars)
	if transport == 'sse':
		typer.echo(f'Starting MCP server on {host}:{port} (sse)...', err=True)
		mcp.run(transport='sse', host=host, port=port)
	elif transport == 'stdio':
		mcp.run()
	else:
		raise typer.BadParameter("Transport must be 'stdio' or 'sse'", param_hint='--transport')


if __name__ == '__main__':
	app()
