"""
Playwright-based job listing pipeline.

This package provides two independently invoked passes:
- Listing pass (ListingOrchestrator): scrapes every configured job board
- Enrichment pass (DetailEnricher): adds full descriptions from posting pages
"""

from .base import (
    SiteConfig,
    JobListing,
    LoadStrategy,
    ExtractionVariant,
    RunStats,
    EnrichmentStats,
)
from .config import SITES, get_site_config, get_enabled_sites
from .manager import ListingOrchestrator
from .enricher import DetailEnricher

__all__ = [
    'SiteConfig',
    'JobListing',
    'LoadStrategy',
    'ExtractionVariant',
    'RunStats',
    'EnrichmentStats',
    'SITES',
    'get_site_config',
    'get_enabled_sites',
    'ListingOrchestrator',
    'DetailEnricher',
]
