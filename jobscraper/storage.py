"""
JSON persistence for listing files.

Both passes exchange data only through these files: a pretty-printed JSON
array of listing objects.
"""

import json
import logging
from pathlib import Path
from typing import List, Union

from .base import JobListing

logger = logging.getLogger(__name__)


def load_listings(path: Union[str, Path]) -> List[JobListing]:
    """Read a JSON array of listings. Raises on missing or malformed files."""
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array in {path}, got {type(data).__name__}")

    return [JobListing.from_dict(item) for item in data]


def save_listings(path: Union[str, Path], listings: List[JobListing]) -> Path:
    """Write listings as a pretty-printed JSON array, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump([job.to_dict() for job in listings], f, indent=2, ensure_ascii=False)
    logger.info(f"Saved {len(listings)} listings to {path}")
    return path
