#!/usr/bin/env python3
"""
Listing pass entry point.

Scrapes every enabled job board and writes the combined listings file.

Usage:
    scrape-listings
    python -m jobscraper.run_listings
"""

import asyncio
import logging
import sys
import time

from .base import Colors
from .config import get_site_summary
from .logging_setup import configure_logging
from .manager import scrape_all
from .settings import get_settings

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    configure_logging(settings)
    start_time = time.time()

    logger.info("🚀 Starting job listing scraper")
    for site in get_site_summary():
        status = "✓" if site['enabled'] else "✗"
        logger.debug(f"{status} {site['key']} ({site['load_strategy']}, {site['variant']}) {site['url']}")

    try:
        asyncio.run(scrape_all(settings))
    except Exception as e:
        logger.exception(f"💥 Fatal error during scraping: {e}")
        return 1

    duration = time.time() - start_time
    logger.info(Colors.green(f"✅ All scraping completed successfully in {duration:.2f} seconds"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
