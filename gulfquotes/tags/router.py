"""Tag API endpoints."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query

from gulfquotes.auth.dependencies import OptionalUser
from gulfquotes.core.errors import envelope
from gulfquotes.quotes.dependencies import QuoteServiceDep
from gulfquotes.quotes.schemas import DEFAULT_QUOTES_LIMIT, MAX_QUOTES_LIMIT

from .dependencies import TagServiceDep
from .schemas import (
    DEFAULT_POPULAR_LIMIT,
    DEFAULT_TAGS_LIMIT,
    MAX_TAGS_LIMIT,
    SortOrder,
    TagSortBy,
)


router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("", summary="List tags")
async def list_tags(
    tag_service: TagServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_TAGS_LIMIT, ge=1, le=MAX_TAGS_LIMIT),
    search: str | None = Query(None, max_length=100),
    sort_by: TagSortBy = Query(TagSortBy.NAME, alias="sortBy"),
    order: SortOrder = Query(SortOrder.ASC),
) -> dict[str, Any]:
    result = await tag_service.list_tags(
        page=page,
        limit=limit,
        search=search.strip() if search else None,
        sort_by=sort_by,
        order=order,
    )
    return envelope(result.to_dict([item.dump() for item in result.items]))


@router.get("/popular", summary="Popular tags")
async def popular_tags(
    tag_service: TagServiceDep,
    limit: int = Query(DEFAULT_POPULAR_LIMIT, ge=1, le=MAX_TAGS_LIMIT),
) -> dict[str, Any]:
    tags = await tag_service.popular(limit)
    return envelope([tag.dump() for tag in tags])


@router.get("/{slug}", summary="Get tag")
async def get_tag(slug: str, tag_service: TagServiceDep) -> dict[str, Any]:
    tag = await tag_service.require_by_slug(slug)
    response = await tag_service.to_response(tag)
    return envelope(response.dump())


@router.get("/{slug}/quotes", summary="Quotes with tag")
async def tag_quotes(
    slug: str,
    user: OptionalUser,
    tag_service: TagServiceDep,
    quote_service: QuoteServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_QUOTES_LIMIT, ge=1, le=MAX_QUOTES_LIMIT),
) -> dict[str, Any]:
    """Quotes carrying the tag, most recent first."""
    tag = await tag_service.require_by_slug(slug)
    quote_ids = await tag_service.quote_ids(tag.id)
    result = await quote_service.list_by_ids(
        quote_ids, page, limit, viewer_id=UUID(str(user.id)) if user else None
    )
    return envelope(result.to_dict([item.dump() for item in result.items]))
