"""
In-memory stand-ins for the Playwright objects the pipeline touches.

Pages answer selector waits and counts from their HTML via BeautifulSoup,
so the same fixtures drive interaction, extraction and enrichment code
without a real browser.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from bs4 import BeautifulSoup
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from jobscraper.strategies.interaction import (
    SCROLL_HEIGHT_JS,
    SCROLL_TO_BOTTOM_JS,
    SCROLL_TO_FRACTION_JS,
)


@dataclass
class FakeResult:
    """What a navigation to a URL returns."""
    html: str = "<html><body></body></html>"
    status: Optional[int] = 200


class FakeResponse:
    def __init__(self, status: int):
        self.status = status

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class FakePage:
    """A page whose DOM is a fixed HTML string."""

    def __init__(self, browser=None, html: str = "<html><body></body></html>",
                 url: str = "about:blank", height: int = 1000):
        self.browser = browser
        self.html = html
        self.url = url
        self.height = height
        self.closed = False
        self.scrolls = 0
        self.height_checks = 0
        self.timeouts: List[int] = []
        self.routes = []
        self.default_timeout = None

    def _soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, 'html.parser')

    async def goto(self, url, wait_until=None, timeout=None):
        result = self.browser.next_result(url)
        await asyncio.sleep(self.browser.navigation_delay)
        if isinstance(result, Exception):
            raise result
        self.url = url
        self.html = result.html
        if result.status is None:
            return None
        return FakeResponse(result.status)

    async def wait_for_selector(self, selector, timeout=None):
        if self._soup().select_one(selector) is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return True

    async def content(self) -> str:
        return self.html

    def current_height(self) -> int:
        return self.height

    async def evaluate(self, expression, arg=None):
        if expression == SCROLL_HEIGHT_JS:
            self.height_checks += 1
            return self.current_height()
        if expression == SCROLL_TO_BOTTOM_JS:
            self.scrolls += 1
            return None
        if expression == SCROLL_TO_FRACTION_JS:
            self.scrolled_fraction = arg
            return None
        raise AssertionError(f"Unexpected evaluate: {expression}")

    async def eval_on_selector_all(self, selector, expression):
        return len(self._soup().select(selector))

    async def wait_for_timeout(self, timeout):
        self.timeouts.append(timeout)

    async def wait_for_function(self, expression, arg=None, timeout=None):
        selector, count = arg
        if len(self._soup().select(selector)) > count:
            return True
        raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for function")

    async def click(self, selector):
        raise PlaywrightTimeoutError(f"No element for {selector}")

    async def route(self, pattern, handler):
        self.routes.append((pattern, handler))

    def set_default_timeout(self, timeout):
        self.default_timeout = timeout

    async def close(self):
        self.closed = True


class GrowingPage(FakePage):
    """A page whose height grows with each scroll until it stops at a fixed size."""

    def __init__(self, heights: List[int], **kwargs):
        super().__init__(**kwargs)
        self.heights = heights

    def current_height(self) -> int:
        return self.heights[min(self.scrolls, len(self.heights) - 1)]


class LoadMorePage(FakePage):
    """
    A page with a load-more button that can be clicked `clickable` times.

    counts[i] is the number of listings after i clicks.
    """

    def __init__(self, counts: List[int], clickable: int, **kwargs):
        super().__init__(**kwargs)
        self.counts = counts
        self.clickable = clickable
        self.clicks = 0
        self.count_checks = 0
        self.growth_waits = []

    async def wait_for_selector(self, selector, timeout=None):
        if self.clicks >= self.clickable:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return True

    async def click(self, selector):
        self.clicks += 1

    async def wait_for_function(self, expression, arg=None, timeout=None):
        selector, count = arg
        self.growth_waits.append((selector, count))
        if self.counts[min(self.clicks, len(self.counts) - 1)] > count:
            return True
        raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for function")

    async def eval_on_selector_all(self, selector, expression):
        self.count_checks += 1
        return self.counts[min(self.clicks, len(self.counts) - 1)]


class FakeContext:
    def __init__(self, browser):
        self.browser = browser
        self.pages: List[FakePage] = []

    async def new_page(self) -> FakePage:
        page = FakePage(browser=self.browser)
        self.pages.append(page)
        return page


ResultSpec = Union[FakeResult, Exception]


class FakeBrowser:
    """
    Stands in for BrowserSession.

    routes maps a URL to the results successive navigations get; the last
    entry repeats once the list is used up. Unknown URLs get `default`.
    """

    def __init__(self, routes: Optional[Dict[str, List[ResultSpec]]] = None,
                 default: Optional[ResultSpec] = None, navigation_delay: float = 0.0):
        self.routes = {url: list(results) for url, results in (routes or {}).items()}
        self.default = default or FakeResult()
        self.navigation_delay = navigation_delay
        self.navigations: List[str] = []
        self.started = False
        self.closed = False
        self.pages: List[FakePage] = []
        self.open_contexts = 0
        self.max_open_contexts = 0
        self.contexts_opened = 0

    def next_result(self, url: str) -> ResultSpec:
        self.navigations.append(url)
        results = self.routes.get(url)
        if not results:
            return self.default
        if len(results) > 1:
            return results.pop(0)
        return results[0]

    async def __aenter__(self):
        self.started = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True

    @asynccontextmanager
    async def new_page(self, block_requests=True):
        page = FakePage(browser=self)
        self.pages.append(page)
        try:
            yield page
        finally:
            await page.close()

    @asynccontextmanager
    async def new_context(self):
        context = FakeContext(self)
        self.open_contexts += 1
        self.contexts_opened += 1
        self.max_open_contexts = max(self.max_open_contexts, self.open_contexts)
        try:
            yield context
        finally:
            self.open_contexts -= 1
