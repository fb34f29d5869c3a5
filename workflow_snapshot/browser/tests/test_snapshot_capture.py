import asyncio

from workflow_snapshot.browser.service import SnapshotCaptureService
from workflow_snapshot.browser.utils import extract_snapshot_yaml, unwrap_snapshot_text
from workflow_snapshot.variables.service import VariableStore

TOOL_RESPONSE = """- Page URL: https://demo.applitools.com/
- Page Title: ACME demo app
- Page Snapshot:
```yaml
- heading "Login Form" [level=4]
- link "Sign in":
  - /url: "#"
```"""


class FakeLocator:
	def __init__(self, snapshot):
		self._snapshot = snapshot

	async def aria_snapshot(self):
		return self._snapshot


class FakePage:
	def __init__(self, snapshot):
		self.snapshot = snapshot
		self.selectors = []

	def locator(self, selector):
		self.selectors.append(selector)
		return FakeLocator(self.snapshot)


def test_extract_snapshot_yaml_returns_fenced_body():
	snapshot = extract_snapshot_yaml(TOOL_RESPONSE)

	assert snapshot.strip().splitlines() == ['- heading "Login Form" [level=4]', '- link "Sign in":', '  - /url: "#"']


def test_extract_snapshot_yaml_without_fence():
	assert extract_snapshot_yaml('- Page URL: about:blank') is None
	assert extract_snapshot_yaml('```yaml\n```') is None


def test_unwrap_snapshot_text_passes_bare_snapshots_through():
	bare = '- button "OK"'

	assert unwrap_snapshot_text(bare) == bare
	assert 'Login Form' in unwrap_snapshot_text(TOOL_RESPONSE)


def test_snapshot_and_save_stores_page_snapshot():
	store = VariableStore()
	page = FakePage('- button "OK"')

	result = asyncio.run(SnapshotCaptureService(store, headless=True).snapshot_and_save(page, 'page'))

	assert result.success
	assert result.chars == len('- button "OK"')
	assert store.get('page') == '- button "OK"'
	assert page.selectors == ['body']


def test_snapshot_and_save_rejects_empty_snapshot():
	store = VariableStore()

	result = asyncio.run(SnapshotCaptureService(store, headless=True).snapshot_and_save(FakePage('  '), 'page'))

	assert not result.success
	assert result.reason == "Couldn't create snapshot."
	assert 'page' not in store
