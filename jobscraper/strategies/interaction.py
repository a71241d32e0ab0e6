"""
Page interaction strategies.

Each strategy brings more listings into the DOM of a live page before
extraction. They share no state across sites: everything they need comes
from the page handle, the site config and the settings.
"""

from typing import Callable, Dict
import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..base import LoadStrategy, SiteConfig

logger = logging.getLogger(__name__)

SCROLL_HEIGHT_JS = "document.body.scrollHeight"
SCROLL_TO_BOTTOM_JS = "window.scrollTo(0, document.body.scrollHeight)"
SCROLL_TO_FRACTION_JS = "(fraction) => window.scrollTo(0, document.body.scrollHeight * fraction)"
COUNT_JS = "(elements) => elements.length"
GROWTH_JS = "([selector, count]) => document.querySelectorAll(selector).length > count"


async def full_scroll(page, config: SiteConfig, settings) -> int:
    """
    Scroll to the bottom until the document height stops changing.

    Stops when two consecutive measurements match or after
    settings.scroll_max_iterations scrolls.

    Returns:
        Number of post-scroll height checks performed
    """
    logger.info("Executing full-scroll strategy")
    last_height = await page.evaluate(SCROLL_HEIGHT_JS)
    checks = 0

    for iteration in range(1, settings.scroll_max_iterations + 1):
        await page.evaluate(SCROLL_TO_BOTTOM_JS)
        await page.wait_for_timeout(settings.scroll_settle_ms)
        new_height = await page.evaluate(SCROLL_HEIGHT_JS)
        checks += 1

        if new_height == last_height:
            logger.debug(f"Height settled at {new_height}px after {iteration} scroll(s)")
            break
        last_height = new_height
    else:
        logger.debug(f"Stopped scrolling after {settings.scroll_max_iterations} iterations")

    return checks


async def partial_scroll(page, config: SiteConfig, settings) -> int:
    """Scroll once to a fraction of the page so lazy controls appear."""
    logger.info("Executing partial-scroll strategy")
    await page.evaluate(SCROLL_TO_FRACTION_JS, settings.partial_scroll_fraction)
    await page.wait_for_timeout(settings.partial_scroll_settle_ms)
    return 1


async def count_listings(page, selector: str) -> int:
    return await page.eval_on_selector_all(selector, COUNT_JS)


async def wait_for_new_listings(page, selector: str, previous_count: int, timeout: int) -> bool:
    """
    Wait until more than previous_count listings are in the DOM.

    Load states are reached once per navigation, so a click that fetches
    more items over XHR has to be detected by the listing count itself.
    Returns False if nothing new arrived within the timeout.
    """
    try:
        await page.wait_for_function(GROWTH_JS, arg=[selector, previous_count], timeout=timeout)
        return True
    except PlaywrightTimeoutError:
        logger.debug(f"No new listings within {timeout}ms of clicking")
        return False


async def load_more(page, config: SiteConfig, settings) -> int:
    """
    Click the "load more" control until the listing count stops growing.

    A missing or unclickable control counts as an attempt and is retried
    after a short pause; once the attempt bound is reached it is treated
    the same as the list running out.

    Returns:
        Number of listing-count checks performed
    """
    logger.info("Executing load-more strategy")
    max_attempts = config.max_attempts or settings.load_more_attempts
    current_count = await count_listings(page, config.listing_selector)
    checks = 1
    attempts = 0

    while attempts < max_attempts:
        previous_count = current_count

        try:
            await page.wait_for_selector(
                config.button_selector, timeout=settings.load_more_button_timeout
            )
            await page.click(config.button_selector)
            await wait_for_new_listings(
                page, config.listing_selector, previous_count, settings.load_more_idle_timeout
            )
            await full_scroll(page, config, settings)
        except PlaywrightError as e:
            attempts += 1
            logger.warning(
                f"Load more button not found or error clicking it "
                f"(attempt {attempts}/{max_attempts}): {e}"
            )
            if attempts >= max_attempts:
                break
            await page.wait_for_timeout(settings.load_more_retry_ms)
            continue

        current_count = await count_listings(page, config.listing_selector)
        checks += 1
        logger.info(f"Loaded {current_count} items (previous: {previous_count})")

        if current_count == previous_count:
            logger.info("No new items loaded, stopping")
            break

        attempts += 1

    return checks


async def no_interaction(page, config: SiteConfig, settings) -> int:
    logger.info("No scroll strategy specified or needed")
    return 0


INTERACTIONS: Dict[LoadStrategy, Callable] = {
    LoadStrategy.NONE: no_interaction,
    LoadStrategy.FULL_SCROLL: full_scroll,
    LoadStrategy.PARTIAL_SCROLL: partial_scroll,
    LoadStrategy.LOAD_MORE: load_more,
}


async def run_interaction(page, config: SiteConfig, settings) -> int:
    """Run the interaction strategy configured for the site."""
    strategy = INTERACTIONS[config.load_strategy]
    return await strategy(page, config, settings)
