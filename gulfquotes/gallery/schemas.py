"""Pydantic schemas for the image gallery."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import Field, HttpUrl, field_validator

from gulfquotes.core.schemas import ApiModel


DEFAULT_GALLERY_LIMIT = 20
MAX_GALLERY_LIMIT = 50

ALLOWED_FORMATS = frozenset({"jpg", "jpeg", "png", "webp", "gif", "avif"})


class GallerySortField(str, Enum):
    CREATED_AT = "createdAt"
    TITLE = "title"
    USAGE_COUNT = "usageCount"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class CreateGalleryRequest(ApiModel):
    """Register an uploaded image in the gallery."""

    url: HttpUrl
    public_id: str = Field(..., min_length=1, max_length=255)
    title: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=1000)
    alt_text: str | None = Field(None, max_length=300)
    format: str = Field(..., min_length=2, max_length=10)
    width: int | None = Field(None, gt=0)
    height: int | None = Field(None, gt=0)
    bytes: int | None = Field(None, gt=0)
    is_global: bool = False

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in ALLOWED_FORMATS:
            msg = f"Unsupported image format: {v}"
            raise ValueError(msg)
        return v


class GalleryResponse(ApiModel):
    """Gallery item with usage count."""

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
    usage_count: int = 0
    created_at: datetime
    updated_at: datetime | None = None
