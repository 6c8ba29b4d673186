"""Database models for user-to-target memberships.

Likes (quotes, comments, replies), bookmarks and author follows are all
"user X is a member of target Y" relations with a denormalized count, so
they share three tables keyed by ``kind``:

- memberships: who is a member of a target (partition per target)
- memberships_by_user: which targets a user joined (partition per user)
- membership_counts: Cassandra counter per target

Membership writes are lightweight transactions (IF NOT EXISTS / IF EXISTS)
and the counter is only moved when the write was applied, so a repeated
toggle by the same user can never double-count.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from gulfquotes.utils.dates import ensure_utc


class MembershipKind(str, Enum):
    """Relation types stored in the membership tables."""

    QUOTE_LIKE = "quote_like"
    COMMENT_LIKE = "comment_like"
    REPLY_LIKE = "reply_like"
    QUOTE_BOOKMARK = "quote_bookmark"
    AUTHOR_FOLLOW = "author_follow"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

MEMBERSHIPS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.memberships (
    kind TEXT,
    target_id UUID,
    user_id UUID,
    created_at TIMESTAMP,
    PRIMARY KEY ((kind, target_id), user_id)
)
"""

MEMBERSHIPS_BY_USER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.memberships_by_user (
    user_id UUID,
    kind TEXT,
    target_id UUID,
    created_at TIMESTAMP,
    PRIMARY KEY ((user_id, kind), target_id)
)
"""

MEMBERSHIP_COUNTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.membership_counts (
    kind TEXT,
    target_id UUID,
    total COUNTER,
    PRIMARY KEY ((kind, target_id))
)
"""

ENGAGEMENT_TABLES_CQL = [
    MEMBERSHIPS_TABLE_CQL,
    MEMBERSHIPS_BY_USER_TABLE_CQL,
    MEMBERSHIP_COUNTS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Membership:
    """One user-to-target relation."""

    kind: str
    target_id: UUID
    user_id: UUID
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "Membership":
        created_at = ensure_utc(row.created_at) or datetime.now(UTC)
        return cls(
            kind=row.kind,
            target_id=row.target_id,
            user_id=row.user_id,
            created_at=created_at,
        )


@dataclass
class ToggleResult:
    """State after a toggle or status check."""

    active: bool
    count: int
