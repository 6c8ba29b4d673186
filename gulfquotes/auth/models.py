"""Database models for users.

Users are provisioned by the identity provider; this table mirrors the
profile fields the API needs plus email notification preferences.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from gulfquotes.auth.permissions import UserRole
from gulfquotes.utils.dates import ensure_utc


USERS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.users (
    id UUID PRIMARY KEY,
    email TEXT,
    name TEXT,
    slug TEXT,
    image TEXT,
    role TEXT,
    email_notifications BOOLEAN,
    email_notification_types SET<TEXT>,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

AUTH_TABLES_CQL = [USERS_TABLE_CQL]

# Notification types a new user receives by email
DEFAULT_EMAIL_NOTIFICATION_TYPES = frozenset({"NEW_QUOTE"})


@dataclass
class User:
    """User profile and notification preferences."""

    id: UUID
    email: str | None = None
    name: str | None = None
    slug: str | None = None
    image: str | None = None
    role: str = UserRole.USER.value
    email_notifications: bool = True
    email_notification_types: set[str] = field(
        default_factory=lambda: set(DEFAULT_EMAIL_NOTIFICATION_TYPES)
    )
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Any) -> "User":
        """Create User from a Cassandra row."""
        email_notifications = getattr(row, "email_notifications", None)
        types = getattr(row, "email_notification_types", None)
        return cls(
            id=row.id,
            email=row.email,
            name=row.name,
            slug=getattr(row, "slug", None),
            image=getattr(row, "image", None),
            role=row.role or UserRole.USER.value,
            email_notifications=True
            if email_notifications is None
            else email_notifications,
            # Cassandra reads an empty set back as null
            email_notification_types=set(types or ()),
            created_at=ensure_utc(row.created_at) or datetime.now(UTC),
            updated_at=ensure_utc(getattr(row, "updated_at", None)),
        )

    def wants_email(self, notification_type: str) -> bool:
        """Whether this user accepts emails for ``notification_type``."""
        return (
            bool(self.email)
            and self.email_notifications
            and notification_type in self.email_notification_types
        )
