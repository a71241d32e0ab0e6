"""
Detail Enricher - fetches each listing's posting page for its full description.

Runs independently of the listing pass: it reads a listing file, visits
every link in batches of concurrent isolated browser contexts, and writes
the enriched listings back to the same file.
"""

import asyncio
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple
import logging

from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError

from .base import (
    Colors,
    DescriptionOutcome,
    EnrichmentStats,
    JobListing,
    NavigationError,
    DESCRIPTION_ERROR,
    FETCH_FAILED,
    NO_DESCRIPTION,
)
from .config import get_description_selector, get_detail_selectors
from .crawlers.browser import BrowserSession
from .settings import Settings, get_settings
from .storage import load_listings, save_listings
from .utils.normalizers import extract_date, resolve_url

logger = logging.getLogger(__name__)

# Detail metadata field -> JobListing attribute
DETAIL_FIELDS = {
    'datePosted': 'date_posted',
    'applicationDeadline': 'application_deadline',
    'jobType': 'job_type',
}


def make_enrichment_browser(settings: Settings) -> BrowserSession:
    """Browser session for the enrichment pass."""
    return BrowserSession(
        headless=settings.headless,
        executable_path=settings.playwright_chromium_executable_path,
    )


def batched(items: List, size: int) -> List[List]:
    """Split items into consecutive batches of at most size items."""
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    return [items[i:i + size] for i in range(0, len(items), size)]


def extract_description(soup: BeautifulSoup, selector: str, page_url: str) -> Tuple[str, DescriptionOutcome]:
    """
    Pull the description out of a detail page.

    Prefers the container's text; if it has none, falls back to the URLs
    of all images inside it (postings published as a flyer image).

    Returns:
        Tuple of (description, outcome)
    """
    try:
        container = soup.select_one(selector)
        text = container.get_text().strip() if container is not None else ''
        if text:
            return text, DescriptionOutcome.TEXT

        image_urls = []
        for img in soup.select(f"{selector} img"):
            src = img.get('src')
            if src and src.strip():
                image_urls.append(resolve_url(src, page_url))

        if image_urls:
            return ', '.join(image_urls), DescriptionOutcome.IMAGES

        return NO_DESCRIPTION, DescriptionOutcome.MISSING
    except Exception as e:
        logger.warning(f"Error extracting job description: {e}")
        return DESCRIPTION_ERROR, DescriptionOutcome.MISSING


def extract_detail_metadata(soup: BeautifulSoup, selectors: Dict[str, str]) -> Dict[str, str]:
    """
    Read supplementary metadata nodes; only fields whose node exists
    and has text are returned.
    """
    found = {}
    for field_name, selector in selectors.items():
        node = soup.select_one(selector)
        if node is None:
            continue
        text = node.get_text().strip()
        if text:
            found[field_name] = text
    return found


def apply_detail_metadata(job: JobListing, metadata: Dict[str, str]):
    """Overwrite listing fields with values found on the detail page."""
    for field_name, value in metadata.items():
        attr = DETAIL_FIELDS.get(field_name)
        if attr is None:
            continue
        if attr == 'date_posted':
            value = extract_date(value)
        setattr(job, attr, value)


class DetailEnricher:
    """
    Adds jobDescription (and detail metadata for some sources) to listings.

    Usage:
        enricher = DetailEnricher()
        listings = await enricher.run()               # settings.enrich_file in place

        stats = EnrichmentStats()
        listings = await enricher.enrich(listings, stats)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        browser_factory: Optional[Callable[[Settings], BrowserSession]] = None,
        batch_size: Optional[int] = None,
    ):
        self.settings = settings or get_settings()
        self.browser_factory = browser_factory or make_enrichment_browser
        self.batch_size = batch_size or self.settings.enrich_batch_size

    async def process_job(self, browser, job: JobListing) -> Tuple[JobListing, DescriptionOutcome]:
        """
        Enrich one listing in its own browser context.

        Never raises: any failure leaves the FETCH_FAILED sentinel on the job.
        """
        try:
            async with browser.new_context() as context:
                page = await context.new_page()
                response = await page.goto(
                    job.link,
                    wait_until="domcontentloaded",
                    timeout=self.settings.enrich_timeout,
                )

                if response is None:
                    raise NavigationError(f"No response for {job.link}")
                if not response.ok:
                    raise NavigationError(f"HTTP {response.status} for {job.link}")

                selector = get_description_selector(job.source)
                try:
                    await page.wait_for_selector(
                        selector, timeout=self.settings.enrich_selector_timeout
                    )
                except PlaywrightError:
                    logger.warning(f"Selector {selector} not found for {job.link}")

                soup = BeautifulSoup(await page.content(), 'html.parser')

                detail_selectors = get_detail_selectors(job.source)
                if detail_selectors:
                    apply_detail_metadata(job, extract_detail_metadata(soup, detail_selectors))

                job.job_description, outcome = extract_description(soup, selector, page.url)
                return job, outcome

        except Exception as e:
            logger.warning(f"Failed to scrape {job.link}: {e}")
            job.job_description = FETCH_FAILED
            return job, DescriptionOutcome.FAILED

    async def enrich(
        self, listings: List[JobListing], stats: Optional[EnrichmentStats] = None
    ) -> List[JobListing]:
        """
        Enrich all listings, one batch at a time, in a single shared browser.

        Jobs within a batch run concurrently; a batch starts only after the
        previous one has fully resolved.
        """
        stats = stats if stats is not None else EnrichmentStats()
        stats.total = len(listings)
        results: List[JobListing] = []

        async with self.browser_factory(self.settings) as browser:
            for batch in batched(listings, self.batch_size):
                outcomes = await asyncio.gather(
                    *(self.process_job(browser, job) for job in batch)
                )
                results.extend(job for job, _ in outcomes)
                stats.record_batch([outcome for _, outcome in outcomes])
                logger.info(f"Processed {len(results)}/{len(listings)} jobs")

        return results

    async def run(self, path: Optional[Path] = None, stats: Optional[EnrichmentStats] = None) -> List[JobListing]:
        """
        Read the listing file, enrich it and write it back in place.

        Raises:
            OSError/ValueError: If the file can't be read, parsed or written
            BrowserLaunchError: If the browser can't be started
        """
        path = Path(path or self.settings.enrich_file)
        stats = stats if stats is not None else EnrichmentStats()
        start_time = time.time()

        jobs = load_listings(path)
        logger.info(f"Starting to process {len(jobs)} jobs...")

        enriched = await self.enrich(jobs, stats)
        save_listings(path, enriched)

        duration = time.time() - start_time
        logger.info(
            Colors.green(f"Completed in {duration:.2f} seconds. ")
            + f"Updated jobs saved to {path}"
        )
        logger.info(
            f"Descriptions: {stats.described} found "
            f"({stats.image_fallback} from images), {stats.missing} missing, "
            f"{stats.failed} failed"
        )
        return enriched
