"""
Data normalization utilities for scrapers.

These functions standardize scraped text into consistent formats.
Placeholder values (NOT_AVAILABLE) pass through untouched.
"""

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from dateutil import parser as date_parser

from ..base import NOT_AVAILABLE


def clean_text(text: Optional[str]) -> Optional[str]:
    """
    Collapse runs of whitespace into single spaces and trim.

    Examples:
        "  Lilongwe,\\n   Malawi " -> "Lilongwe, Malawi"
    """
    if not text or text == NOT_AVAILABLE:
        return text
    return re.sub(r'\s+', ' ', text).strip()


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """
    Replace anything other than word characters, whitespace and hyphens
    with a space, then collapse whitespace.

    Examples:
        "Accountant (Senior) – Blantyre!" -> "Accountant Senior Blantyre"
        "Data-Entry Clerk" -> "Data-Entry Clerk"
    """
    if not value or value == NOT_AVAILABLE:
        return value
    value = re.sub(r'[^\w\s-]', ' ', value)
    return re.sub(r'\s+', ' ', value).strip()


def is_valid_url(value: Optional[str]) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not value or value == NOT_AVAILABLE:
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def resolve_url(href: Optional[str], base_url: str) -> str:
    """
    Resolve an href against the page URL.

    Returns NOT_AVAILABLE for empty hrefs.
    """
    if not href or not href.strip():
        return NOT_AVAILABLE
    try:
        return urljoin(base_url, href.strip())
    except ValueError:
        return href.strip()


def extract_date(date_string: Optional[str]) -> str:
    """
    Normalize a date to YYYY-MM-DD.

    Returns the original string if it can't be parsed, and NOT_AVAILABLE
    for empty input.

    Examples:
        2024-03-01T09:30:00+00:00 -> 2024-03-01
        March 5, 2024 -> 2024-03-05
        2 days ago -> 2 days ago
    """
    if not date_string or date_string == NOT_AVAILABLE:
        return NOT_AVAILABLE
    try:
        parsed = date_parser.parse(date_string)
    except (ValueError, OverflowError):
        return date_string
    return parsed.date().isoformat()


def strip_label(text: Optional[str], label: str = 'Closes:') -> Optional[str]:
    """
    Remove a leading label such as "Closes: " from a field value.

    Examples:
        "Closes: 12 Apr 2024" -> "12 Apr 2024"
    """
    if not text or text == NOT_AVAILABLE:
        return text
    return re.sub(rf'{re.escape(label)}\s*', '', text, count=1, flags=re.IGNORECASE)
