#!/usr/bin/env python3
"""
Enrichment pass entry point.

Adds full descriptions to the listings file in place.

Usage:
    enrich-listings
    python -m jobscraper.run_enrichment
"""

import asyncio
import logging
import sys

from .enricher import DetailEnricher
from .logging_setup import configure_logging
from .settings import get_settings

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    configure_logging(settings)

    try:
        asyncio.run(DetailEnricher(settings=settings).run())
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
