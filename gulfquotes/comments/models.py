"""Database models for quote comments and replies.

Tables:
- comments: comments of a quote, partitioned by quote, newest first
- comments_by_id: comment id lookup pointing into ``comments``
- comment_replies: replies of a comment, oldest first
- replies_by_id: reply id lookup pointing into ``comment_replies``

Author name and image are denormalized from the access token at write time.
Like counts live in the membership counters; reply counts are COUNT queries.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from gulfquotes.utils.dates import ensure_utc, utc_now


COMMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments (
    quote_id UUID,
    created_at TIMESTAMP,
    comment_id UUID,
    user_id UUID,
    user_name TEXT,
    user_image TEXT,
    content TEXT,
    is_edited BOOLEAN,
    edited_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY ((quote_id), created_at, comment_id)
) WITH CLUSTERING ORDER BY (created_at DESC, comment_id ASC)
"""

COMMENTS_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_id (
    comment_id UUID PRIMARY KEY,
    quote_id UUID,
    created_at TIMESTAMP
)
"""

COMMENT_REPLIES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comment_replies (
    comment_id UUID,
    created_at TIMESTAMP,
    reply_id UUID,
    quote_id UUID,
    user_id UUID,
    user_name TEXT,
    user_image TEXT,
    content TEXT,
    is_edited BOOLEAN,
    edited_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY ((comment_id), created_at, reply_id)
) WITH CLUSTERING ORDER BY (created_at ASC, reply_id ASC)
"""

REPLIES_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.replies_by_id (
    reply_id UUID PRIMARY KEY,
    comment_id UUID,
    quote_id UUID,
    created_at TIMESTAMP
)
"""

COMMENTS_TABLES_CQL = [
    COMMENTS_TABLE_CQL,
    COMMENTS_BY_ID_TABLE_CQL,
    COMMENT_REPLIES_TABLE_CQL,
    REPLIES_BY_ID_TABLE_CQL,
]


@dataclass
class Comment:
    """Comment on a quote."""

    quote_id: UUID
    user_id: UUID
    content: str
    id: UUID = field(default_factory=uuid4)
    user_name: str | None = None
    user_image: str | None = None
    is_edited: bool = False
    edited_at: datetime | None = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_row(cls, row: Any) -> "Comment":
        created_at = ensure_utc(row.created_at) or utc_now()
        return cls(
            id=row.comment_id,
            quote_id=row.quote_id,
            user_id=row.user_id,
            user_name=row.user_name,
            user_image=row.user_image,
            content=row.content,
            is_edited=bool(row.is_edited),
            edited_at=ensure_utc(row.edited_at),
            created_at=created_at,
            updated_at=ensure_utc(row.updated_at) or created_at,
        )


@dataclass
class Reply:
    """Reply to a comment. Replies do not nest."""

    comment_id: UUID
    quote_id: UUID
    user_id: UUID
    content: str
    id: UUID = field(default_factory=uuid4)
    user_name: str | None = None
    user_image: str | None = None
    is_edited: bool = False
    edited_at: datetime | None = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_row(cls, row: Any) -> "Reply":
        created_at = ensure_utc(row.created_at) or utc_now()
        return cls(
            id=row.reply_id,
            comment_id=row.comment_id,
            quote_id=row.quote_id,
            user_id=row.user_id,
            user_name=row.user_name,
            user_image=row.user_image,
            content=row.content,
            is_edited=bool(row.is_edited),
            edited_at=ensure_utc(row.edited_at),
            created_at=created_at,
            updated_at=ensure_utc(row.updated_at) or created_at,
        )
