"""Author directory API endpoints.

Provides routes for:
- Author listing with search and A-Z filter
- Author profile lookup
- Follow toggle and status
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query

from gulfquotes.auth.dependencies import CurrentUser
from gulfquotes.core.errors import envelope

from .dependencies import AuthorServiceDep
from .schemas import DEFAULT_AUTHORS_LIMIT, MAX_AUTHORS_LIMIT, FollowStatusResponse


router = APIRouter(prefix="/api/authors", tags=["authors"])


@router.get("", summary="List authors")
async def list_authors(
    author_service: AuthorServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_AUTHORS_LIMIT, ge=1, le=MAX_AUTHORS_LIMIT),
    search: str | None = Query(None, max_length=100),
    letter: str | None = Query(None, max_length=1),
) -> dict[str, Any]:
    """List author profiles ordered by name.

    ``letter`` is matched against the uppercased first letter of the name.
    """
    result = await author_service.list_authors(
        page=page,
        limit=limit,
        search=search.strip() if search else None,
        letter=letter.upper() if letter else None,
    )
    return envelope(result.to_dict([item.dump() for item in result.items]))


@router.get("/{slug}", summary="Get author profile")
async def get_author(slug: str, author_service: AuthorServiceDep) -> dict[str, Any]:
    profile = await author_service.require_by_slug(slug)
    response = await author_service.to_response(profile)
    return envelope(response.dump())


@router.post("/{slug}/follow", summary="Toggle follow")
async def toggle_follow(
    slug: str,
    user: CurrentUser,
    author_service: AuthorServiceDep,
) -> dict[str, Any]:
    result = await author_service.toggle_follow(slug, UUID(str(user.id)))
    return envelope(
        FollowStatusResponse(followed=result.active, followers=result.count).dump()
    )


@router.get("/{slug}/follow", summary="Follow status")
async def follow_status(
    slug: str,
    user: CurrentUser,
    author_service: AuthorServiceDep,
) -> dict[str, Any]:
    result = await author_service.follow_status(slug, UUID(str(user.id)))
    return envelope(
        FollowStatusResponse(followed=result.active, followers=result.count).dump()
    )
