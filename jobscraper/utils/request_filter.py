"""
Request filtering for page visits.

Aborts requests for trackers, popups and images so listing pages load
faster and with fewer moving parts. The predicate is a plain function of
the URL; install_request_filter() wires it into Playwright routing.
"""

import logging

logger = logging.getLogger(__name__)

BLOCKED_PATTERNS = (
    'wonderpush',
    'popup',
    'newsletter',
    'analytics',
    'tracking',
    'ads',
    'facebook.com',
    'google-analytics',
    'googletagmanager',
    'doubleclick',
    '.gif',
    '.png',
    '.jpg',
    '.jpeg',
    '.webp',
    '.svg',
)


def should_block(url: str) -> bool:
    """True if the URL matches any noise pattern (case-insensitive)."""
    url_lower = url.lower()
    return any(pattern in url_lower for pattern in BLOCKED_PATTERNS)


async def install_request_filter(page, predicate=should_block):
    """
    Route every request on the page through the predicate.

    Top-level document navigations are always allowed so a listing URL
    that happens to contain a pattern still loads.
    """

    async def _route(route):
        request = route.request
        if not request.is_navigation_request() and predicate(request.url):
            logger.debug(f"Blocking request: {request.url}")
            await route.abort()
        else:
            await route.continue_()

    await page.route("**/*", _route)
    logger.debug("Request interception enabled")
