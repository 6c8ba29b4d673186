"""Search suggestion endpoint."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request

from gulfquotes.core.dependencies import service_from_state
from gulfquotes.core.errors import envelope

from .schemas import DEFAULT_SUGGESTIONS_LIMIT, MAX_SUGGESTIONS_LIMIT
from .service import SearchService


router = APIRouter(prefix="/api/search", tags=["search"])


def get_search_service(request: Request) -> SearchService:
    """Get SearchService from app state."""
    return service_from_state(request, "search_service")


SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]


@router.get("/suggestions", summary="Search suggestions")
async def get_suggestions(
    search_service: SearchServiceDep,
    q: str = Query("", max_length=200),
    limit: int = Query(DEFAULT_SUGGESTIONS_LIMIT),
    include_trending: bool = Query(True, alias="includeTrending"),
) -> dict[str, Any]:
    """Prefix suggestions for ``q``, or trending searches when ``q`` is empty.

    ``limit`` is clamped to 1..10.
    """
    limit = min(MAX_SUGGESTIONS_LIMIT, max(1, limit))
    response = await search_service.get_suggestions(q, limit, include_trending)
    return envelope(response.dump())
