"""Database models for author profiles.

An author profile is the person a quote is attributed to (not necessarily
a registered user). Users follow author profiles; follows are stored as
``MembershipKind.AUTHOR_FOLLOW`` memberships.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from gulfquotes.utils.dates import ensure_utc


AUTHOR_PROFILES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.author_profiles (
    id UUID PRIMARY KEY,
    name TEXT,
    slug TEXT,
    bio TEXT,
    born TEXT,
    died TEXT,
    influences TEXT,
    image TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

AUTHOR_PROFILES_BY_SLUG_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.author_profiles_by_slug (
    slug TEXT PRIMARY KEY,
    author_profile_id UUID
)
"""

AUTHORS_TABLES_CQL = [
    AUTHOR_PROFILES_TABLE_CQL,
    AUTHOR_PROFILES_BY_SLUG_TABLE_CQL,
]


@dataclass
class AuthorProfile:
    """Quote author profile."""

    id: UUID
    name: str
    slug: str
    bio: str | None = None
    born: str | None = None
    died: str | None = None
    influences: str | None = None
    image: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Any) -> "AuthorProfile":
        created_at = ensure_utc(row.created_at) or datetime.now(UTC)
        return cls(
            id=row.id,
            name=row.name,
            slug=row.slug,
            bio=row.bio,
            born=row.born,
            died=row.died,
            influences=row.influences,
            image=row.image,
            created_at=created_at,
            updated_at=row.updated_at,
        )

    @property
    def initial(self) -> str:
        """Uppercased first letter, used by the A-Z filter."""
        return self.name[:1].upper()
