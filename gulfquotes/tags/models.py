"""Database models for tags.

``quotes_by_tag`` is written whenever a quote's tag set changes and is the
read source for tag pages and quote counts.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from gulfquotes.utils.dates import ensure_utc


TAGS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.tags (
    id UUID PRIMARY KEY,
    name TEXT,
    slug TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

TAGS_BY_SLUG_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.tags_by_slug (
    slug TEXT PRIMARY KEY,
    tag_id UUID
)
"""

QUOTES_BY_TAG_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quotes_by_tag (
    tag_id UUID,
    quote_id UUID,
    created_at TIMESTAMP,
    PRIMARY KEY ((tag_id), quote_id)
)
"""

TAGS_TABLES_CQL = [
    TAGS_TABLE_CQL,
    TAGS_BY_SLUG_TABLE_CQL,
    QUOTES_BY_TAG_TABLE_CQL,
]


@dataclass
class Tag:
    id: UUID
    name: str
    slug: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Any) -> "Tag":
        return cls(
            id=row.id,
            name=row.name,
            slug=row.slug,
            created_at=ensure_utc(row.created_at) or datetime.now(UTC),
            updated_at=ensure_utc(row.updated_at),
        )
