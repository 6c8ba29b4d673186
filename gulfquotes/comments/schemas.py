"""Pydantic schemas for comments and replies."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from gulfquotes.core.schemas import ApiModel


DEFAULT_COMMENTS_LIMIT = 10
MAX_COMMENTS_LIMIT = 50
DEFAULT_REPLIES_LIMIT = 50
MAX_CONTENT_LENGTH = 1000


class CommentSortBy(str, Enum):
    RECENT = "recent"
    POPULAR = "popular"


# ==============================================================================
# Requests
# ==============================================================================


class ContentRequest(ApiModel):
    """Body for creating or editing a comment or reply."""

    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Content cannot be empty")
        return v


# ==============================================================================
# Responses
# ==============================================================================


class CommentUser(ApiModel):
    id: UUID
    name: str | None = None
    image: str | None = None


class ReplyCount(BaseModel):
    replies: int = 0


class CommentResponse(ApiModel):
    id: UUID
    quote_id: UUID
    user_id: UUID
    content: str
    is_edited: bool = False
    edited_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    user: CommentUser
    likes: int = 0
    is_liked: bool = False
    reply_count: ReplyCount = Field(default_factory=ReplyCount, alias="_count")


class ReplyResponse(ApiModel):
    id: UUID
    comment_id: UUID
    quote_id: UUID
    user_id: UUID
    content: str
    is_edited: bool = False
    edited_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    user: CommentUser
    likes: int = 0
    is_liked: bool = False


class LikeResponse(ApiModel):
    liked: bool
    likes: int
