"""Pydantic schemas for tags."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from gulfquotes.core.schemas import ApiModel


DEFAULT_TAGS_LIMIT = 20
MAX_TAGS_LIMIT = 100
DEFAULT_POPULAR_LIMIT = 10


class TagSortBy(str, Enum):
    NAME = "name"
    POPULAR = "popular"
    RECENT = "recent"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TagResponse(ApiModel):
    id: UUID
    name: str
    slug: str
    quote_count: int = 0
    created_at: datetime
