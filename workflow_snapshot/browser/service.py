import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from workflow_snapshot.browser.views import CaptureResult
from workflow_snapshot.config import get_headless
from workflow_snapshot.variables.service import VariableStore

logger = logging.getLogger(__name__)

NAVIGATION_TIMEOUT_MS = 30000
SNAPSHOT_ROOT_SELECTOR = 'body'


async def take_aria_snapshot(page: Page, selector: str = SNAPSHOT_ROOT_SELECTOR) -> str:
	"""YAML accessibility snapshot of *selector* on the current page."""
	return await page.locator(selector).aria_snapshot()


class SnapshotCaptureService:
	"""Produces raw accessibility snapshots for the filter and saves them into a store."""

	def __init__(self, store: VariableStore, headless: bool | None = None) -> None:
		self.store = store
		self.headless = get_headless() if headless is None else headless

	async def snapshot_and_save(self, page: Page, variable: str) -> CaptureResult:
		"""Take a snapshot of the current page and save it into *variable*."""
		try:
			snapshot = await take_aria_snapshot(page)
		except PlaywrightError as e:
			logger.warning(f"Couldn't create snapshot: {e}")
			return CaptureResult(success=False, reason=f"Couldn't create snapshot: {e}")

		if not snapshot or not snapshot.strip():
			logger.warning("Couldn't create snapshot: page produced an empty accessibility tree")
			return CaptureResult(success=False, reason="Couldn't create snapshot.")

		self.store.set(variable, snapshot)
		logger.info(f"📸 Snapshot saved to variable '{variable}' ({len(snapshot)} chars)")
		return CaptureResult(success=True, variable=variable, chars=len(snapshot))

	async def capture(self, url: str, variable: str) -> CaptureResult:
		"""Open *url* in a fresh browser, snapshot it and save it into *variable*."""
		async with async_playwright() as playwright:
			browser = await playwright.chromium.launch(headless=self.headless)
			try:
				page = await browser.new_page()
				logger.info(f'🔗 Navigating to: {url}')
				try:
					await page.goto(url, timeout=NAVIGATION_TIMEOUT_MS)
					await page.wait_for_load_state('domcontentloaded', timeout=10000)
				except PlaywrightError as e:
					logger.error(f'Navigation to {url} failed: {e}')
					return CaptureResult(success=False, reason=f'Navigation failed: {e}')
				return await self.snapshot_and_save(page, variable)
			finally:
				await browser.close()
