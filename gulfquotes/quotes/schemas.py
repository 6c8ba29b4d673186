"""Pydantic schemas for quotes."""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from gulfquotes.core.schemas import ApiModel
from gulfquotes.utils.text import SLUG_PATTERN


DEFAULT_QUOTES_LIMIT = 10
MAX_QUOTES_LIMIT = 50
MAX_CONTENT_LENGTH = 1500


# ==============================================================================
# Requests
# ==============================================================================


class QuoteImageInput(ApiModel):
    gallery_id: UUID
    is_active: bool = True
    is_background: bool = False


def _single_background(images: list[QuoteImageInput]) -> list[QuoteImageInput]:
    if sum(1 for image in images if image.is_background) > 1:
        raise ValueError("Only one background image is allowed")
    return images


class CreateQuoteRequest(ApiModel):
    """Quote creation payload."""

    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    category_id: UUID
    author_profile_id: UUID
    slug: str | None = Field(None, pattern=SLUG_PATTERN)
    background_image: str | None = None
    featured: bool = False
    tag_ids: list[UUID] = Field(default_factory=list)
    images: list[QuoteImageInput] = Field(default_factory=list)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Quote content is required")
        return v

    @field_validator("images")
    @classmethod
    def one_background(cls, v: list[QuoteImageInput]) -> list[QuoteImageInput]:
        return _single_background(v)


class UpdateQuoteRequest(ApiModel):
    """Partial quote update.

    ``updated_at`` is the timestamp the client last saw; when present it is
    used for the optimistic lock instead of the freshly read one.
    """

    content: str | None = Field(None, min_length=1, max_length=MAX_CONTENT_LENGTH)
    slug: str | None = Field(None, min_length=1, pattern=SLUG_PATTERN)
    category_id: UUID | None = None
    author_profile_id: UUID | None = None
    featured: bool | None = None
    background_image: str | None = None
    tag_ids: list[UUID] | None = None
    updated_at: datetime | None = None


class AddQuoteImagesRequest(ApiModel):
    images: list[QuoteImageInput] = Field(..., min_length=1)

    @field_validator("images")
    @classmethod
    def one_background(cls, v: list[QuoteImageInput]) -> list[QuoteImageInput]:
        return _single_background(v)


class RemoveQuoteImageRequest(ApiModel):
    public_id: str = Field(..., min_length=1)


# ==============================================================================
# Responses
# ==============================================================================


class CategoryResponse(ApiModel):
    id: UUID
    name: str
    slug: str


class AuthorProfileSummary(ApiModel):
    id: UUID
    name: str
    slug: str
    image: str | None = None


class TagSummary(ApiModel):
    id: UUID
    name: str
    slug: str


class QuoteImageResponse(ApiModel):
    gallery_id: UUID
    url: str
    public_id: str
    alt_text: str | None = None
    is_active: bool
    is_background: bool


class QuoteResponse(ApiModel):
    id: UUID
    content: str
    slug: str
    author_id: UUID
    author_profile_id: UUID
    category_id: UUID
    background_image: str | None = None
    featured: bool = False
    author_profile: AuthorProfileSummary | None = None
    category: CategoryResponse | None = None
    tags: list[TagSummary] = Field(default_factory=list)
    images: list[QuoteImageResponse] = Field(default_factory=list)
    likes: int = 0
    bookmarks: int = 0
    is_liked: bool = False
    is_bookmarked: bool = False
    created_at: datetime
    updated_at: datetime


class LikeResponse(ApiModel):
    liked: bool
    likes: int


class BookmarkResponse(ApiModel):
    bookmarked: bool
    bookmarks: int
