"""
Extraction strategies: DOM to listing records.

Each strategy takes the parsed page (BeautifulSoup of page.content()),
the site config and the page URL, and returns raw field dicts keyed by
the JSON field names. Nothing here touches the browser, so every
strategy can be exercised against static HTML.

finalize_listings() then normalizes the raw dicts into JobListing objects.
"""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
import logging

from bs4 import BeautifulSoup, Tag

from ..base import ExtractionVariant, JobListing, SiteConfig, NOT_AVAILABLE
from ..utils.normalizers import (
    clean_text,
    sanitize_text,
    is_valid_url,
    resolve_url,
    extract_date,
    strip_label,
)

logger = logging.getLogger(__name__)


# ============================================================
# FIELD READERS
# ============================================================

def _select(element: Tag, selector: Optional[str]) -> Optional[Tag]:
    if not selector:
        return None
    return element.select_one(selector)


def parse_text(element: Tag, selector: Optional[str]) -> str:
    """Whitespace-collapsed text of the first match, or NOT_AVAILABLE."""
    node = _select(element, selector)
    if node is None:
        return NOT_AVAILABLE
    text = clean_text(node.get_text())
    return text or NOT_AVAILABLE


def parse_link(element: Tag, selector: Optional[str], page_url: str) -> str:
    """Absolute href of the first match, or NOT_AVAILABLE."""
    node = _select(element, selector)
    if node is None:
        return NOT_AVAILABLE
    return resolve_url(node.get('href'), page_url)


def parse_image(element: Tag, selector: Optional[str], page_url: str) -> str:
    """Absolute src of the first match, or NOT_AVAILABLE."""
    node = _select(element, selector)
    if node is None:
        return NOT_AVAILABLE
    return resolve_url(node.get('src'), page_url)


def parse_date(element: Tag, selector: Optional[str]) -> str:
    """Prefer a machine-readable datetime attribute over visible text."""
    node = _select(element, selector)
    if node is None:
        return NOT_AVAILABLE
    machine = node.get('datetime')
    if machine and machine.strip():
        return machine.strip()
    return clean_text(node.get_text()) or NOT_AVAILABLE


def is_valid_record(record: Dict) -> bool:
    """
    A record needs a real absolute link and a position longer than two
    characters once sanitized (so "C++" doesn't survive as "C").
    """
    link = record.get('link', NOT_AVAILABLE)
    position = record.get('position', NOT_AVAILABLE)
    if not position or position == NOT_AVAILABLE:
        return False
    return is_valid_url(link) and len(sanitize_text(position)) > 2


def _keep_valid(records: List[Dict], source: str) -> List[Dict]:
    kept = [r for r in records if is_valid_record(r)]
    dropped = len(records) - len(kept)
    if dropped:
        logger.debug(f"{source}: dropped {dropped} record(s) without a valid link or position")
    return kept


# ============================================================
# STRATEGIES
# ============================================================

def extract_generic(soup: BeautifulSoup, config: SiteConfig, page_url: str) -> List[Dict]:
    """Read the full field set from every listing element."""
    selectors = config.field_selectors
    records = []

    for element in soup.select(config.listing_selector):
        records.append({
            'link': parse_link(element, selectors['link'], page_url),
            'companyLogo': parse_image(element, selectors['companyLogo'], page_url),
            'position': parse_text(element, selectors['position']),
            'companyName': parse_text(element, selectors['companyName']),
            'location': parse_text(element, selectors['location']),
            'jobType': parse_text(element, selectors['jobType']),
            'datePosted': parse_date(element, selectors['datePosted']),
            'applicationDeadline': strip_label(
                parse_text(element, selectors['applicationDeadline'])
            ),
        })

    return _keep_valid(records, config.name)


def extract_metadata_variant(soup: BeautifulSoup, config: SiteConfig, page_url: str) -> List[Dict]:
    """
    Reduced field set for single-organization boards.

    Logo, company and job type come from config.constant_fields in
    finalize_listings().
    """
    selectors = config.field_selectors
    records = []

    for element in soup.select(config.listing_selector):
        records.append({
            'link': parse_link(element, selectors['link'], page_url),
            'position': parse_text(element, selectors['position']),
            'location': parse_text(element, selectors['location']),
            'datePosted': parse_date(element, selectors['datePosted']),
            'applicationDeadline': strip_label(
                parse_text(element, selectors['applicationDeadline'])
            ),
        })

    return _keep_valid(records, config.name)


def extract_sectioned(soup: BeautifulSoup, config: SiteConfig, page_url: str) -> List[Dict]:
    """
    Listings grouped under headed sections.

    Every article in a section gets the section heading as its job type.
    Company, logo, location and date are optional per article.
    """
    selectors = config.field_selectors
    records = []

    for section in soup.select(config.listing_selector):
        heading = _select(section, selectors['type'])
        section_type = clean_text(heading.get_text()) if heading is not None else ''

        for article in section.select(selectors['article']):
            records.append({
                'link': parse_link(article, selectors['link'], page_url),
                'companyLogo': parse_image(article, selectors['logo'], page_url),
                'position': parse_text(article, selectors['position']),
                'companyName': parse_text(article, selectors['companyName']),
                'location': parse_text(article, selectors['location']),
                'jobType': section_type,
                'datePosted': parse_date(article, selectors['datePosted']),
                'applicationDeadline': NOT_AVAILABLE,
            })

    return _keep_valid(records, config.name)


EXTRACTORS: Dict[ExtractionVariant, Callable] = {
    ExtractionVariant.GENERIC: extract_generic,
    ExtractionVariant.METADATA: extract_metadata_variant,
    ExtractionVariant.SECTIONED: extract_sectioned,
}


# ============================================================
# POST-PROCESSING
# ============================================================

def finalize_listings(
    raw_listings: List[Dict],
    config: SiteConfig,
    scraped_at: Optional[str] = None,
) -> List[JobListing]:
    """
    Normalize raw records and tag them with source, timestamp and URL validity.
    """
    scraped_at = scraped_at or datetime.now(timezone.utc).isoformat()
    constants = config.constant_fields
    listings = []

    for raw in raw_listings:
        record = {**raw, **constants}
        company_name = record.get('companyName', NOT_AVAILABLE)
        if 'companyName' not in constants:
            company_name = sanitize_text(company_name)

        listings.append(JobListing(
            link=record['link'],
            source=config.name,
            position=sanitize_text(record['position']),
            company_name=company_name,
            company_logo=record.get('companyLogo', NOT_AVAILABLE),
            location=clean_text(record.get('location', NOT_AVAILABLE)),
            job_type=record.get('jobType', NOT_AVAILABLE),
            date_posted=extract_date(record.get('datePosted')),
            application_deadline=record.get('applicationDeadline', NOT_AVAILABLE),
            scraped_at=scraped_at,
            is_valid_url=is_valid_url(record['link']),
        ))

    return listings


def extract_listings(html: str, config: SiteConfig, page_url: str) -> List[JobListing]:
    """
    Parse page HTML with the site's extraction variant and normalize the result.

    Extraction errors are logged and yield no listings for the site.
    """
    try:
        soup = BeautifulSoup(html, 'html.parser')
        strategy = EXTRACTORS[config.variant]
        raw_listings = strategy(soup, config, page_url)
        return finalize_listings(raw_listings, config)
    except Exception as e:
        logger.error(f"Error extracting listings from {config.name}: {e}")
        return []
