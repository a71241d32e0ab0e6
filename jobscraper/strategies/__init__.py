"""Per-site page interaction and extraction strategies, dispatched by enum."""

from .interaction import (
    INTERACTIONS,
    full_scroll,
    partial_scroll,
    load_more,
    run_interaction,
)
from .extraction import (
    EXTRACTORS,
    extract_generic,
    extract_metadata_variant,
    extract_sectioned,
    extract_listings,
    finalize_listings,
)

__all__ = [
    'INTERACTIONS',
    'full_scroll',
    'partial_scroll',
    'load_more',
    'run_interaction',
    'EXTRACTORS',
    'extract_generic',
    'extract_metadata_variant',
    'extract_sectioned',
    'extract_listings',
    'finalize_listings',
]
