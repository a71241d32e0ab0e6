"""
Core data structures for the job listing pipeline.

This module defines the site configuration record, the listing record that
both passes read and write, and the per-run statistics objects.
"""

from typing import List, Dict, Optional, Any, Set
from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


# Sentinel values written in place of unavailable data
NOT_AVAILABLE = "N/A"
NO_DESCRIPTION = "No description found"
DESCRIPTION_ERROR = "Error extracting description"
FETCH_FAILED = "Could not fetch description"


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for colorized logging."""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    CYAN = '\033[96m'
    GRAY = '\033[90m'

    @staticmethod
    def green(text):
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def yellow(text):
        return f"{Colors.YELLOW}{text}{Colors.RESET}"

    @staticmethod
    def red(text):
        return f"{Colors.RED}{text}{Colors.RESET}"

    @staticmethod
    def cyan(text):
        return f"{Colors.CYAN}{text}{Colors.RESET}"

    @staticmethod
    def gray(text):
        return f"{Colors.GRAY}{text}{Colors.RESET}"

    @staticmethod
    def bold(text):
        return f"{Colors.BOLD}{text}{Colors.RESET}"


class ScraperError(Exception):
    """Base class for pipeline errors."""


class BrowserLaunchError(ScraperError):
    """The browser process could not be started. Fatal for a run."""


class NavigationError(ScraperError):
    """A page could not be loaded (timeout, HTTP error, network error)."""


class LoadStrategy(Enum):
    """How additional listings are brought into the DOM before extraction."""
    NONE = "none"
    FULL_SCROLL = "full-scroll"         # Scroll until height stops growing
    PARTIAL_SCROLL = "partial-scroll"   # One scroll to a quarter of the page
    LOAD_MORE = "load-more"             # Click a "load more" control


class ExtractionVariant(Enum):
    """Which DOM-to-record mapping a site uses."""
    GENERIC = "generic"         # Full field set from field selectors
    METADATA = "metadata"       # Reduced field set, constants filled afterwards
    SECTIONED = "sectioned"     # Listings grouped under headed sections


# Selector keys each extraction variant reads
REQUIRED_SELECTORS: Dict[ExtractionVariant, tuple] = {
    ExtractionVariant.GENERIC: (
        'link', 'companyLogo', 'position', 'companyName', 'location',
        'jobType', 'datePosted', 'applicationDeadline',
    ),
    ExtractionVariant.METADATA: (
        'link', 'position', 'location', 'datePosted', 'applicationDeadline',
    ),
    ExtractionVariant.SECTIONED: (
        'article', 'link', 'logo', 'position', 'companyName', 'location',
        'datePosted', 'type',
    ),
}


@dataclass
class SiteConfig:
    """Configuration for a job board."""
    name: str                               # Source identifier written to every listing
    url: str                                # Listing page URL
    output_file: str                        # Per-site file name
    listing_selector: str                   # One match per listing (or section)
    field_selectors: Dict[str, str] = field(default_factory=dict)
    load_strategy: LoadStrategy = LoadStrategy.NONE
    variant: ExtractionVariant = ExtractionVariant.GENERIC
    button_selector: Optional[str] = None   # Load-more control
    max_attempts: Optional[int] = None      # Load-more bound
    constant_fields: Dict[str, str] = field(default_factory=dict)
    description_selector: Optional[str] = None   # Detail page description container
    detail_selectors: Dict[str, str] = field(default_factory=dict)  # Detail page metadata
    enabled: bool = True

    def missing_selectors(self) -> List[str]:
        """Selector keys the configured variant needs but the config lacks."""
        required = REQUIRED_SELECTORS[self.variant]
        return [key for key in required if not self.field_selectors.get(key)]

    def validate(self):
        """Raise ValueError if the config can't drive its strategies."""
        missing = self.missing_selectors()
        if missing:
            raise ValueError(
                f"Site '{self.name}' ({self.variant.value}) is missing selectors: "
                f"{', '.join(missing)}"
            )
        if self.load_strategy == LoadStrategy.LOAD_MORE and not self.button_selector:
            raise ValueError(f"Site '{self.name}' uses load-more without a button_selector")


# (attribute, JSON key) in output order
LISTING_FIELDS = (
    ('link', 'link'),
    ('company_logo', 'companyLogo'),
    ('position', 'position'),
    ('company_name', 'companyName'),
    ('location', 'location'),
    ('job_type', 'jobType'),
    ('date_posted', 'datePosted'),
    ('application_deadline', 'applicationDeadline'),
    ('source', 'source'),
    ('scraped_at', 'scrapedAt'),
    ('is_valid_url', 'isValidUrl'),
    ('job_description', 'jobDescription'),
)


@dataclass
class JobListing:
    """
    One scraped job posting.

    Fields left as None were never set (e.g. jobDescription before enrichment,
    or keys missing from an input file) and are omitted on serialization.
    Extraction always fills every field, using NOT_AVAILABLE where needed.
    """
    link: str
    source: str
    position: Optional[str] = None
    company_name: Optional[str] = None
    company_logo: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[str] = None
    date_posted: Optional[str] = None
    application_deadline: Optional[str] = None
    scraped_at: Optional[str] = None
    is_valid_url: Optional[bool] = None
    job_description: Optional[str] = None

    # Keys from an input file that this model doesn't know about
    extra: Dict[str, Any] = field(default_factory=dict)

    # Known keys read from an input file; written back even when null
    present_keys: Set[str] = field(default_factory=set, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for attr, key in LISTING_FIELDS:
            value = getattr(self, attr)
            if value is not None or key in self.present_keys:
                data[key] = value
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'JobListing':
        known = {key: attr for attr, key in LISTING_FIELDS}
        kwargs = {}
        extra = {}
        for key, value in data.items():
            if key in known:
                kwargs[known[key]] = value
            else:
                extra[key] = value
        kwargs.setdefault('link', NOT_AVAILABLE)
        kwargs.setdefault('source', NOT_AVAILABLE)
        present = {key for key in data if key in known}
        return cls(extra=extra, present_keys=present, **kwargs)


@dataclass
class RunStats:
    """Counters for one listing run. Created per run, never stored on the orchestrator."""
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    attempts: int = 0
    successes: int = 0
    failures: int = 0
    total_listings: int = 0
    valid_urls: int = 0
    listings_by_source: Dict[str, int] = field(default_factory=dict)
    error_details: List[Dict] = field(default_factory=list)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def record_listings(self, listings: List[JobListing]):
        """Tally the combined result once all sites are done."""
        self.valid_urls = sum(1 for job in listings if job.is_valid_url)
        breakdown: Dict[str, int] = {}
        for job in listings:
            breakdown[job.source] = breakdown.get(job.source, 0) + 1
        self.listings_by_source = breakdown

    def to_dict(self) -> Dict:
        return {
            'started_at': self.started_at.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'duration_seconds': self.duration_seconds,
            'attempts': self.attempts,
            'successes': self.successes,
            'failures': self.failures,
            'total_listings': self.total_listings,
            'valid_urls': self.valid_urls,
            'listings_by_source': dict(self.listings_by_source),
            'error_details': self.error_details[:10],  # Limit error details
        }


class DescriptionOutcome(Enum):
    """How a job's description was obtained."""
    TEXT = "text"
    IMAGES = "images"
    MISSING = "missing"
    FAILED = "failed"


@dataclass
class EnrichmentStats:
    """Counters for one enrichment run, updated after each batch resolves."""
    total: int = 0
    processed: int = 0
    described: int = 0
    image_fallback: int = 0
    missing: int = 0
    failed: int = 0

    def record_batch(self, outcomes: List[DescriptionOutcome]):
        for outcome in outcomes:
            self.processed += 1
            if outcome == DescriptionOutcome.TEXT:
                self.described += 1
            elif outcome == DescriptionOutcome.IMAGES:
                self.described += 1
                self.image_fallback += 1
            elif outcome == DescriptionOutcome.MISSING:
                self.missing += 1
            else:
                self.failed += 1

    def to_dict(self) -> Dict:
        return {
            'total': self.total,
            'processed': self.processed,
            'described': self.described,
            'image_fallback': self.image_fallback,
            'missing': self.missing,
            'failed': self.failed,
        }
