"""Shared utilities for scrapers."""

from .normalizers import (
    clean_text,
    sanitize_text,
    is_valid_url,
    resolve_url,
    extract_date,
    strip_label,
)
from .request_filter import should_block, install_request_filter

__all__ = [
    'clean_text',
    'sanitize_text',
    'is_valid_url',
    'resolve_url',
    'extract_date',
    'strip_label',
    'should_block',
    'install_request_filter',
]
