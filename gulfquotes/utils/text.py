"""Text helpers for slugs, quote content and email tag values."""

import re
import unicodedata


_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")
_WHITESPACE = re.compile(r"\s+")
# Letters, digits, underscore, whitespace and basic punctuation survive
_DISALLOWED_CONTENT_CHARS = re.compile(r"""[^\w\s.,!?'"()-]""")
_DISALLOWED_TAG_CHARS = re.compile(r"[^a-zA-Z0-9_-]")

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
SLUG_SOURCE_LENGTH = 50


def slugify(text: str) -> str:
    """Lowercase ASCII slug with single dashes between words.

    >>> slugify("  The Only Way Out Is Through!  ")
    'the-only-way-out-is-through'
    """
    normalized = unicodedata.normalize("NFKD", text)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    return _NON_SLUG_CHARS.sub("-", ascii_text).strip("-")


def slug_from_content(content: str) -> str:
    """Slug derived from the first characters of a quote."""
    return slugify(content[:SLUG_SOURCE_LENGTH])


def sanitize_content(content: str) -> str:
    """Normalize whitespace and drop characters outside basic punctuation."""
    collapsed = _WHITESPACE.sub(" ", content.strip())
    return _DISALLOWED_CONTENT_CHARS.sub("", collapsed)


def sanitize_tag_value(value: str) -> str:
    """Make a value safe for email provider tags.

    Every character other than ASCII letters, digits, ``_`` and ``-`` is
    replaced with ``_``.

    >>> sanitize_tag_value("José Martí")
    'Jos__Mart_'
    """
    return _DISALLOWED_TAG_CHARS.sub("_", value)
