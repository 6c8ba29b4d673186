"""Database models for the image gallery.

Gallery items are uploaded images (hosted by the image CDN) that can be
attached to quotes as backgrounds. ``quotes_by_gallery`` is the reverse of
``quote_images`` and gives each item its usage count.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from gulfquotes.utils.dates import ensure_utc


GALLERY_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.gallery (
    id UUID PRIMARY KEY,
    url TEXT,
    public_id TEXT,
    title TEXT,
    description TEXT,
    alt_text TEXT,
    format TEXT,
    width INT,
    height INT,
    bytes INT,
    is_global BOOLEAN,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

GALLERY_BY_PUBLIC_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.gallery_by_public_id (
    public_id TEXT PRIMARY KEY,
    gallery_id UUID
)
"""

QUOTES_BY_GALLERY_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quotes_by_gallery (
    gallery_id UUID,
    quote_id UUID,
    PRIMARY KEY ((gallery_id), quote_id)
)
"""

GALLERY_TABLES_CQL = [
    GALLERY_TABLE_CQL,
    GALLERY_BY_PUBLIC_ID_TABLE_CQL,
    QUOTES_BY_GALLERY_TABLE_CQL,
]


@dataclass
class GalleryItem:
    """Uploaded image available to quotes."""

    id: UUID
    url: str
    public_id: str
    title: str | None = None
    description: str | None = None
    alt_text: str | None = None
    format: str | None = None
    width: int | None = None
    height: int | None = None
    bytes: int | None = None
    is_global: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Any) -> "GalleryItem":
        return cls(
            id=row.id,
            url=row.url,
            public_id=row.public_id,
            title=row.title,
            description=row.description,
            alt_text=row.alt_text,
            format=row.format,
            width=row.width,
            height=row.height,
            bytes=row.bytes,
            is_global=bool(row.is_global),
            created_at=ensure_utc(row.created_at) or datetime.now(UTC),
            updated_at=ensure_utc(row.updated_at),
        )

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match on title, description and alt text."""
        needle = needle.lower()
        return any(
            needle in (value or "").lower()
            for value in (self.title, self.description, self.alt_text)
        )
