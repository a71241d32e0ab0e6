"""
Headless browser session shared by both pipeline passes.

Wraps Playwright's async API with:
- A single Chromium process per run (launch once, close once)
- Scoped tabs for the listing pass (request filter installed)
- Scoped isolated contexts for the enrichment pass
- Cleanup with timeouts so a wedged browser can't hang the run
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional, Dict, List
from playwright.async_api import async_playwright, Browser, BrowserContext, Page
import logging

from ..base import BrowserLaunchError
from ..utils.request_filter import install_request_filter

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-gpu',
    '--disable-dev-shm-usage',
    '--no-first-run',
    '--no-zygote',
    '--disable-background-timer-throttling',
    '--disable-backgrounding-occluded-windows',
    '--disable-renderer-backgrounding',
    '--disable-web-security',
    '--disable-features=VizDisplayCompositor',
]


class BrowserSession:
    """
    One Chromium instance and the pages/contexts opened from it.

    Usage:
        async with BrowserSession(executable_path=...) as browser:
            async with browser.new_page() as page:
                await page.goto(url)
    """

    def __init__(
        self,
        headless: bool = True,
        executable_path: Optional[str] = None,
        viewport: Optional[Dict[str, int]] = None,
        user_agent: Optional[str] = None,
        default_timeout: Optional[float] = None,
        launch_args: Optional[List[str]] = None,
        cleanup_timeout: float = 5.0,
    ):
        """
        Initialize the session (the browser is launched on start()).

        Args:
            headless: Run browser in headless mode
            executable_path: Chromium binary to use instead of Playwright's bundled one
            viewport: Page viewport for listing tabs
            user_agent: User agent for listing tabs
            default_timeout: Default Playwright timeout in milliseconds for listing tabs
            launch_args: Chromium command-line flags
            cleanup_timeout: Seconds to wait for each close operation
        """
        self.headless = headless
        self.executable_path = executable_path or None
        self.viewport = viewport
        self.user_agent = user_agent
        self.default_timeout = default_timeout
        self.launch_args = launch_args if launch_args is not None else LAUNCH_ARGS
        self.cleanup_timeout = cleanup_timeout
        self._playwright = None
        self._browser: Optional[Browser] = None

    @property
    def is_started(self) -> bool:
        return self._browser is not None

    async def start(self):
        """Launch the browser. Raises BrowserLaunchError on failure."""
        if self._browser is not None:
            return
        logger.info("Initializing browser")
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                executable_path=self.executable_path,
                args=self.launch_args,
            )
        except Exception as e:
            logger.error(f"Failed to launch browser: {e}")
            await self.close()
            raise BrowserLaunchError(f"Could not launch browser: {e}") from e

        if not self._browser.is_connected():
            await self.close()
            raise BrowserLaunchError("Browser launched but not connected")

    async def close(self):
        """Close the browser and stop Playwright, with timeouts to prevent hanging."""
        if self._browser:
            logger.info("Closing browser")
            try:
                await asyncio.wait_for(self._browser.close(), timeout=self.cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Browser close timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright:
            try:
                await asyncio.wait_for(self._playwright.stop(), timeout=self.cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Playwright stop timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")
            self._playwright = None

    def _require_browser(self) -> Browser:
        if self._browser is None:
            raise RuntimeError("Browser not initialized. Call start() first.")
        return self._browser

    @asynccontextmanager
    async def new_page(self, block_requests: bool = True):
        """
        Open one tab, yield it, and always close it.

        The tab gets the session viewport, user agent and default timeout,
        and the request filter unless block_requests is False.
        """
        browser = self._require_browser()
        options = {}
        if self.viewport:
            options['viewport'] = self.viewport
        if self.user_agent:
            options['user_agent'] = self.user_agent

        page: Page = await browser.new_page(**options)
        try:
            if self.default_timeout:
                page.set_default_timeout(self.default_timeout)
            if block_requests:
                await install_request_filter(page)
            yield page
        finally:
            try:
                await asyncio.wait_for(page.close(), timeout=self.cleanup_timeout)
            except Exception as e:
                logger.debug(f"Error closing page: {e}")

    @asynccontextmanager
    async def new_context(self):
        """
        Open an isolated browsing context (separate cookies and storage),
        yield it, and always close it.
        """
        browser = self._require_browser()
        context: BrowserContext = await browser.new_context()
        try:
            yield context
        finally:
            try:
                await asyncio.wait_for(context.close(), timeout=self.cleanup_timeout)
            except Exception as e:
                logger.debug(f"Error closing context: {e}")

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
