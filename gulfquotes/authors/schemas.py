"""Pydantic schemas for author profiles."""

from datetime import datetime
from uuid import UUID

from gulfquotes.core.schemas import ApiModel


DEFAULT_AUTHORS_LIMIT = 12
MAX_AUTHORS_LIMIT = 50


class AuthorProfileResponse(ApiModel):
    """Author profile with aggregate counts."""

    id: UUID
    name: str
    slug: str
    bio: str | None = None
    born: str | None = None
    died: str | None = None
    influences: str | None = None
    image: str | None = None
    quote_count: int = 0
    follower_count: int = 0
    created_at: datetime


class FollowStatusResponse(ApiModel):
    followed: bool
    followers: int

