"""
Site configurations for all job board sources.

Each site has a SiteConfig that defines:
- The listing page URL and the selector for one listing
- Field selectors for the extraction variant it uses
- The page interaction needed before extraction
- Detail page selectors used by the enrichment pass
"""

from .base import SiteConfig, LoadStrategy, ExtractionVariant


# Detail page description container for sources without their own
DEFAULT_DESCRIPTION_SELECTOR = '.job_description'


# ============================================================
# SITE CONFIGURATIONS
# ============================================================

SITES = {
    # ========== GENERIC (3 sites) ==========
    # WP Job Manager boards: one <li>/<article> per listing

    'careersmw': SiteConfig(
        name='careersmw',
        url='https://careersmw.com/',
        output_file='career_jobs.json',
        listing_selector='li',
        field_selectors={
            'link': 'a',
            'companyLogo': '.company_logo',
            'position': '.position',
            'companyName': '.company',
            'location': '.location',
            'jobType': '.job-type',
            'datePosted': '.meta time',
            'applicationDeadline': '.application-deadline',
        },
        load_strategy=LoadStrategy.FULL_SCROLL,
    ),

    'ntchito': SiteConfig(
        name='ntchito',
        url='https://ntchito.com/jobs-in-malawi/',
        output_file='nchito_jobs.json',
        listing_selector='article',
        field_selectors={
            'link': 'a',
            'companyLogo': '.company_logo',
            'position': '.entry-title',
            'companyName': '.company-name',
            'location': '.google_map_link',
            'jobType': '.job-type',
            'datePosted': '.date time',
            'applicationDeadline': '.application-deadline',
        },
        load_strategy=LoadStrategy.FULL_SCROLL,
    ),

    'jobsearchmalawi': SiteConfig(
        name='jobsearchmalawi',
        url='https://jobsearchmalawi.com/',
        output_file='job_search_malawi.json',
        listing_selector='li',
        field_selectors={
            'link': 'a',
            'companyLogo': '.company_logo',
            'position': '.position',
            'companyName': '.company',
            'location': '.location',
            'jobType': '.job-type',
            'datePosted': '.date time',
            'applicationDeadline': '.application-deadline',
        },
        load_strategy=LoadStrategy.LOAD_MORE,
        button_selector='.load_more_jobs',
        max_attempts=4,
    ),

    # ========== METADATA (1 site) ==========
    # Single organization: company fields are constants, detail page has dates

    'unicef-careers': SiteConfig(
        name='unicef-careers',
        url='https://jobs.unicef.org/en-us/listing/',
        output_file='unicef_jobs.json',
        listing_selector='#recent-jobs-content .list-view--item',
        field_selectors={
            'link': 'a.job-link, a',
            'position': '.job-link, .list-title, a',
            'location': '.location, .list-location',
            'datePosted': '.date time, .list-date time',
            'applicationDeadline': '.close-date',
        },
        variant=ExtractionVariant.METADATA,
        constant_fields={
            'companyLogo': 'https://logowik.com/content/uploads/images/930_unicef.jpg',
            'companyName': 'UNICEF',
            'jobType': 'International Organization',
        },
        description_selector='#job-details',
        detail_selectors={
            'datePosted': '.open-date > time',
            'applicationDeadline': '.close-date > time',
            'jobType': '.work-type',
        },
    ),

    # ========== SECTIONED (1 site) ==========
    # Columns headed by a category title, each holding several articles

    'opportunitiesforyouth': SiteConfig(
        name='opportunitiesforyouth',
        url='https://opportunitiesforyouth.org/category/scholarships/',
        output_file='opportunitiesforyouth_jobs.json',
        listing_selector='.et_pb_column_1_3',
        field_selectors={
            'article': 'article',
            'link': 'a',
            'logo': 'img',
            'position': 'h2, h3, h4',
            'companyName': '.company-name',
            'location': 'div:nth-child(2) > div:nth-child(2) > p:nth-child(1) > a:nth-child(2)',
            'datePosted': 'div:nth-child(2) > div:nth-child(2) > p:nth-child(1) > span:nth-child(1)',
            'type': '.module-head h1',
        },
        load_strategy=LoadStrategy.PARTIAL_SCROLL,
        variant=ExtractionVariant.SECTIONED,
        description_selector='.entry-content',
    ),
}


def _validate_registry():
    for key, config in SITES.items():
        config.validate()
        if key != config.name:
            raise ValueError(f"Registry key '{key}' does not match site name '{config.name}'")


_validate_registry()


# ============================================================
# HELPER FUNCTIONS
# ============================================================

def get_site_config(site_key: str) -> SiteConfig:
    """
    Get configuration for a site by its key.

    Args:
        site_key: Site identifier (e.g., 'careersmw', 'unicef-careers')

    Returns:
        SiteConfig for the site

    Raises:
        ValueError: If site_key is not found
    """
    if site_key not in SITES:
        valid_keys = ', '.join(sorted(SITES.keys()))
        raise ValueError(f"Unknown site: '{site_key}'. Valid sites: {valid_keys}")
    return SITES[site_key]


def get_enabled_sites() -> dict:
    """Get all enabled sites, in registry order."""
    return {k: v for k, v in SITES.items() if v.enabled}


def get_description_selector(source: str) -> str:
    """Detail page description selector for a source, falling back to the default."""
    config = SITES.get(source)
    if config and config.description_selector:
        return config.description_selector
    return DEFAULT_DESCRIPTION_SELECTOR


def get_detail_selectors(source: str) -> dict:
    """Detail page metadata selectors for a source (empty for most sources)."""
    config = SITES.get(source)
    return dict(config.detail_selectors) if config else {}


def get_site_summary() -> list:
    """Get a summary of all sites for display."""
    summary = []
    for key, config in SITES.items():
        summary.append({
            'key': key,
            'load_strategy': config.load_strategy.value,
            'variant': config.variant.value,
            'enabled': config.enabled,
            'url': config.url,
        })
    return summary
