"""Gallery API endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, status

from gulfquotes.auth.dependencies import CurrentUser
from gulfquotes.core.dependencies import service_from_state
from gulfquotes.core.errors import envelope

from .schemas import (
    DEFAULT_GALLERY_LIMIT,
    MAX_GALLERY_LIMIT,
    CreateGalleryRequest,
    GallerySortField,
    SortDirection,
)
from .service import GalleryService


def get_gallery_service(request: Request) -> GalleryService:
    """Get GalleryService from app state."""
    return service_from_state(request, "gallery_service")


GalleryServiceDep = Annotated[GalleryService, Depends(get_gallery_service)]

router = APIRouter(prefix="/api/gallery", tags=["gallery"])


@router.get("", summary="List gallery items")
async def list_gallery(
    _user: CurrentUser,
    gallery_service: GalleryServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_GALLERY_LIMIT, ge=1, le=MAX_GALLERY_LIMIT),
    search: str | None = Query(None, max_length=100),
    is_global: bool | None = Query(None, alias="isGlobal"),
    formats: str | None = Query(None, description="Comma separated formats"),
    sort_field: GallerySortField = Query(
        GallerySortField.CREATED_AT, alias="sortField"
    ),
    sort_direction: SortDirection = Query(SortDirection.DESC, alias="sortDirection"),
) -> dict[str, Any]:
    result = await gallery_service.list_items(
        page=page,
        limit=limit,
        search=search,
        is_global=is_global,
        formats=formats.split(",") if formats else None,
        sort_field=sort_field,
        sort_direction=sort_direction,
    )
    return envelope(result.to_dict([item.dump() for item in result.items]))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create gallery item")
async def create_gallery_item(
    data: CreateGalleryRequest,
    _user: CurrentUser,
    gallery_service: GalleryServiceDep,
) -> dict[str, Any]:
    item = await gallery_service.create(data)
    return envelope(item.dump())
