"""Database models for notifications.

Tables:
- notifications: a user's notifications, partitioned by recipient, newest first
- notifications_by_id: id lookup used for ownership checks

Notification types:
- NEW_QUOTE: a followed author profile published a quote
- COMMENT_REPLY: someone replied to the user's comment
- SYSTEM: announcement
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from gulfquotes.utils.dates import ensure_utc, utc_now


class NotificationType(str, Enum):
    """Types of notifications."""

    NEW_QUOTE = "NEW_QUOTE"
    COMMENT_REPLY = "COMMENT_REPLY"
    SYSTEM = "SYSTEM"


class NotificationFilter(str, Enum):
    ALL = "all"
    UNREAD = "unread"
    READ = "read"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

NOTIFICATIONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.notifications (
    user_id UUID,
    created_at TIMESTAMP,
    notification_id UUID,
    type TEXT,
    title TEXT,
    message TEXT,
    quote_id UUID,
    author_profile_id UUID,
    actor_id UUID,
    is_read BOOLEAN,
    read_at TIMESTAMP,
    PRIMARY KEY ((user_id), created_at, notification_id)
) WITH CLUSTERING ORDER BY (created_at DESC, notification_id ASC)
"""

NOTIFICATIONS_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.notifications_by_id (
    notification_id UUID PRIMARY KEY,
    user_id UUID,
    created_at TIMESTAMP
)
"""

NOTIFICATIONS_TABLES_CQL = [
    NOTIFICATIONS_TABLE_CQL,
    NOTIFICATIONS_BY_ID_TABLE_CQL,
]


# ==============================================================================
# Entities
# ==============================================================================


@dataclass
class Notification:
    """In-app notification for one recipient."""

    user_id: UUID
    type: NotificationType
    title: str
    message: str
    id: UUID = field(default_factory=uuid4)
    quote_id: UUID | None = None
    author_profile_id: UUID | None = None
    actor_id: UUID | None = None
    read: bool = False
    read_at: datetime | None = None
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_row(cls, row: Any) -> "Notification":
        """Create Notification from a Cassandra row."""
        return cls(
            id=row.notification_id,
            user_id=row.user_id,
            type=NotificationType(row.type),
            title=row.title,
            message=row.message,
            quote_id=row.quote_id,
            author_profile_id=row.author_profile_id,
            actor_id=row.actor_id,
            read=bool(row.is_read),
            read_at=ensure_utc(row.read_at),
            created_at=ensure_utc(row.created_at) or utc_now(),
        )


@dataclass
class NewQuoteEmailJob:
    """Email work handed to the dispatcher after a quote fan-out."""

    quote_id: UUID
    author_profile_id: UUID
    author_name: str
    followers: list[Any]
    request_id: str | None = None
