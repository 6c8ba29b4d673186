"""Utility modules for the Gulfquotes API."""

from gulfquotes.utils.dates import ensure_utc, utc_now
from gulfquotes.utils.text import (
    SLUG_PATTERN,
    sanitize_content,
    sanitize_tag_value,
    slug_from_content,
    slugify,
)


__all__ = [
    "SLUG_PATTERN",
    "ensure_utc",
    "sanitize_content",
    "sanitize_tag_value",
    "slug_from_content",
    "slugify",
    "utc_now",
]
