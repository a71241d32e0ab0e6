"""
Listing Orchestrator - runs every configured site and combines the results.

Sites are visited strictly one after another in a single browser, one tab
at a time. A failing site is retried a bounded number of times and then
contributes no listings; it never stops the run.
"""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional
import logging

from playwright.async_api import Error as PlaywrightError

from .base import Colors, JobListing, NavigationError, RunStats, SiteConfig
from .config import get_enabled_sites
from .crawlers.browser import BrowserSession
from .settings import Settings, get_settings
from .storage import save_listings
from .strategies.extraction import extract_listings
from .strategies.interaction import run_interaction

logger = logging.getLogger(__name__)


def make_listing_browser(settings: Settings) -> BrowserSession:
    """Browser session for the listing pass."""
    return BrowserSession(
        headless=settings.headless,
        executable_path=settings.scraper_executable_path,
        viewport={'width': settings.viewport_width, 'height': settings.viewport_height},
        user_agent=settings.user_agent,
        default_timeout=settings.navigation_timeout,
    )


class ListingOrchestrator:
    """
    Scrapes all enabled sites and writes the combined listings file.

    Usage:
        orchestrator = ListingOrchestrator()
        listings = await orchestrator.run()

        # Inspect statistics
        stats = RunStats()
        listings = await orchestrator.run(stats)
        print(stats.to_dict())
    """

    def __init__(
        self,
        sites: Optional[List[SiteConfig]] = None,
        settings: Optional[Settings] = None,
        browser_factory: Optional[Callable[[Settings], BrowserSession]] = None,
        output_file: Optional[Path] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            sites: Site configs to scrape, in order (defaults to all enabled sites)
            settings: Pipeline settings (defaults to the global settings)
            browser_factory: Builds the browser session for a run
            output_file: Combined output path (defaults to settings.output_file)
        """
        self.settings = settings or get_settings()
        self.sites = sites if sites is not None else list(get_enabled_sites().values())
        self.browser_factory = browser_factory or make_listing_browser
        self.output_file = Path(output_file or self.settings.output_file)

    async def scrape_site(self, browser, config: SiteConfig, stats: RunStats) -> List[JobListing]:
        """
        Scrape one site in its own tab.

        Raises:
            NavigationError: On a missing or non-2xx response
            playwright Error: On navigation timeouts and other browser failures
        """
        site_logger = logging.getLogger(f"scraper.{config.name}")
        stats.attempts += 1

        async with browser.new_page() as page:
            site_logger.info(f"Navigating to {config.url}")
            response = await page.goto(
                config.url,
                wait_until="networkidle",
                timeout=self.settings.navigation_timeout,
            )

            if response is None:
                raise NavigationError(f"No response for {config.url}")
            if not response.ok:
                raise NavigationError(f"HTTP {response.status} for {config.url}")

            try:
                await page.wait_for_selector(
                    config.listing_selector, timeout=self.settings.listing_wait_timeout
                )
            except PlaywrightError as e:
                site_logger.warning(
                    f"Listing selector '{config.listing_selector}' not found on {config.url}: {e}"
                )

            await run_interaction(page, config, self.settings)

            site_logger.info(f"Extracting listings from {config.name}")
            html = await page.content()
            listings = extract_listings(html, config, page.url)

        site_logger.info(Colors.green(f"Found {len(listings)} valid listings for {config.name}"))
        stats.total_listings += len(listings)
        return listings

    async def scrape_site_with_retry(
        self, browser, config: SiteConfig, stats: RunStats
    ) -> List[JobListing]:
        """
        Scrape a site, retrying the whole site on failure.

        Returns an empty list once all attempts are exhausted.
        """
        total_attempts = self.settings.max_retries + 1

        for attempt in range(1, total_attempts + 1):
            try:
                logger.info(f"Scraping {config.name} (attempt {attempt}/{total_attempts})")
                listings = await self.scrape_site(browser, config, stats)
                stats.successes += 1
                return listings
            except Exception as e:
                logger.error(
                    f"{Colors.red('[ERR]')} Attempt {attempt}/{total_attempts} failed for "
                    f"{config.name} ({config.url}): {e}"
                )
                stats.error_details.append({
                    'site': config.name,
                    'url': config.url,
                    'attempt': attempt,
                    'error': str(e),
                })

                if attempt == total_attempts:
                    logger.error(f"All {total_attempts} attempts failed for {config.name}")
                    stats.failures += 1
                    return []

                logger.info(f"Waiting {self.settings.retry_delay}s before retry...")
                await asyncio.sleep(self.settings.retry_delay)

        return []

    async def run(self, stats: Optional[RunStats] = None) -> List[JobListing]:
        """
        Scrape every site, write the combined file and report statistics.

        Args:
            stats: Statistics object to fill (a fresh one is created if omitted)

        Returns:
            Combined listings from all sites

        Raises:
            BrowserLaunchError: If the browser can't be started
            OSError: If the output file can't be written
        """
        stats = stats if stats is not None else RunStats()
        all_listings: List[JobListing] = []

        logger.info(f"Starting to scrape {len(self.sites)} sites: {[s.name for s in self.sites]}")

        async with self.browser_factory(self.settings) as browser:
            for index, config in enumerate(self.sites):
                if index > 0:
                    await asyncio.sleep(self.settings.site_delay)
                listings = await self.scrape_site_with_retry(browser, config, stats)
                all_listings.extend(listings)

        save_listings(self.output_file, all_listings)

        stats.completed_at = datetime.now(timezone.utc)
        stats.record_listings(all_listings)
        self.log_final_stats(stats)
        return all_listings

    def log_final_stats(self, stats: RunStats):
        logger.info(Colors.green("=== SCRAPING COMPLETED ==="))
        logger.info(f"Total sites attempted: {stats.attempts}")
        logger.info(f"Successful scrapes: {stats.successes}")
        logger.info(f"Failed scrapes: {stats.failures}")
        logger.info(f"Total listings found: {stats.total_listings}")
        logger.info(f"Valid URLs: {stats.valid_urls}")
        logger.info(f"Duration: {stats.duration_seconds or 0:.1f}s")
        logger.info(f"Output saved to: {self.output_file}")

        logger.info("Listings by source:")
        for source, count in stats.listings_by_source.items():
            logger.info(f"  {source}: {count} listings")


async def scrape_all(settings: Optional[Settings] = None) -> Dict:
    """
    Run the listing pass with default sites.

    Returns:
        Statistics dictionary for the run
    """
    stats = RunStats()
    await ListingOrchestrator(settings=settings).run(stats)
    return stats.to_dict()
