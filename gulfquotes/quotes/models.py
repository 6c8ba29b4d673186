"""Database models for quotes.

Tables:
- quotes: main quote row, ``updated_at`` doubles as the optimistic lock
- quotes_by_slug: unique slug claims (LWT)
- quotes_by_author_profile: quotes of an author profile, newest first
- quote_images: gallery images attached to a quote
- categories: quote categories
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from gulfquotes.utils.dates import ensure_utc, utc_now


QUOTES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quotes (
    id UUID PRIMARY KEY,
    content TEXT,
    slug TEXT,
    author_id UUID,
    author_profile_id UUID,
    category_id UUID,
    background_image TEXT,
    featured BOOLEAN,
    tag_ids SET<UUID>,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

QUOTES_BY_SLUG_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quotes_by_slug (
    slug TEXT PRIMARY KEY,
    quote_id UUID
)
"""

QUOTES_BY_AUTHOR_PROFILE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quotes_by_author_profile (
    author_profile_id UUID,
    created_at TIMESTAMP,
    quote_id UUID,
    PRIMARY KEY ((author_profile_id), created_at, quote_id)
) WITH CLUSTERING ORDER BY (created_at DESC, quote_id ASC)
"""

QUOTE_IMAGES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quote_images (
    quote_id UUID,
    gallery_id UUID,
    is_active BOOLEAN,
    is_background BOOLEAN,
    created_at TIMESTAMP,
    PRIMARY KEY ((quote_id), gallery_id)
)
"""

CATEGORIES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.categories (
    id UUID PRIMARY KEY,
    name TEXT,
    slug TEXT,
    description TEXT,
    created_at TIMESTAMP
)
"""

QUOTES_TABLES_CQL = [
    QUOTES_TABLE_CQL,
    QUOTES_BY_SLUG_TABLE_CQL,
    QUOTES_BY_AUTHOR_PROFILE_TABLE_CQL,
    QUOTE_IMAGES_TABLE_CQL,
    CATEGORIES_TABLE_CQL,
]


@dataclass
class Quote:
    """Quote entity."""

    id: UUID
    content: str
    slug: str
    author_id: UUID
    author_profile_id: UUID
    category_id: UUID
    background_image: str | None = None
    featured: bool = False
    tag_ids: set[UUID] = field(default_factory=set)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_row(cls, row: Any) -> "Quote":
        """Create Quote from a Cassandra row."""
        created_at = ensure_utc(row.created_at) or utc_now()
        return cls(
            id=row.id,
            content=row.content,
            slug=row.slug,
            author_id=row.author_id,
            author_profile_id=row.author_profile_id,
            category_id=row.category_id,
            background_image=getattr(row, "background_image", None),
            featured=bool(row.featured),
            tag_ids=set(row.tag_ids or ()),
            created_at=created_at,
            updated_at=ensure_utc(row.updated_at) or created_at,
        )


@dataclass
class QuoteImage:
    quote_id: UUID
    gallery_id: UUID
    is_active: bool = True
    is_background: bool = False
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_row(cls, row: Any) -> "QuoteImage":
        return cls(
            quote_id=row.quote_id,
            gallery_id=row.gallery_id,
            is_active=True if row.is_active is None else row.is_active,
            is_background=bool(row.is_background),
            created_at=ensure_utc(row.created_at) or utc_now(),
        )


@dataclass
class Category:
    id: UUID
    name: str
    slug: str
    description: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> "Category":
        return cls(
            id=row.id,
            name=row.name,
            slug=row.slug,
            description=getattr(row, "description", None),
        )
