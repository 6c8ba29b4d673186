"""Quote API endpoints.

Provides routes for:
- Quote CRUD (create and modify restricted to ADMIN/AUTHOR)
- Like and bookmark toggles
- Gallery image attachment
- The caller's bookmarks
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query, status

from gulfquotes.auth.dependencies import AuthorUser, CurrentUser, OptionalUser
from gulfquotes.comments.dependencies import CommentServiceDep
from gulfquotes.core.errors import ValidationFailedError, envelope
from gulfquotes.core.logging import get_logger
from gulfquotes.core.pagination import Page
from gulfquotes.notifications.dependencies import NotificationServiceDep

from .dependencies import QuoteServiceDep
from .schemas import (
    DEFAULT_QUOTES_LIMIT,
    MAX_QUOTES_LIMIT,
    AddQuoteImagesRequest,
    BookmarkResponse,
    CreateQuoteRequest,
    LikeResponse,
    RemoveQuoteImageRequest,
    UpdateQuoteRequest,
)


logger = get_logger(__name__)

router = APIRouter(prefix="/api/quotes", tags=["quotes"])
users_router = APIRouter(prefix="/api/users", tags=["quotes"])


def _quote_page(result: Page) -> dict[str, Any]:
    return {
        "data": [item.dump() for item in result.items],
        "total": result.total,
        "hasMore": result.has_more,
        "page": result.page,
        "limit": result.limit,
    }


# ==============================================================================
# CRUD
# ==============================================================================


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create quote")
async def create_quote(
    data: CreateQuoteRequest,
    user: AuthorUser,
    quote_service: QuoteServiceDep,
    notification_service: NotificationServiceDep,
) -> dict[str, Any]:
    """Create a quote and notify the author profile's followers.

    Notification failures are logged and do not fail the request.
    """
    quote = await quote_service.create(data, UUID(str(user.id)))

    try:
        await notification_service.create_quote_notifications_for_followers(
            quote_id=quote.id,
            author_profile_id=quote.author_profile_id,
            actor_id=UUID(str(user.id)),
        )
    except Exception as e:
        logger.warning(
            "quote_notifications_failed",
            quote_id=str(quote.id),
            error=str(e),
            error_type=type(e).__name__,
        )

    response = await quote_service.to_response(quote, UUID(str(user.id)))
    return envelope(response.dump())


@router.get("", summary="List quotes")
async def list_quotes(
    user: CurrentUser,
    quote_service: QuoteServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_QUOTES_LIMIT, ge=1, le=MAX_QUOTES_LIMIT),
    search: str | None = Query(None, max_length=200),
    author_id: str | None = Query(None, alias="authorId"),
    category_id: UUID | None = Query(None, alias="categoryId"),
    author_profile_id: UUID | None = Query(None, alias="authorProfileId"),
) -> dict[str, Any]:
    """List quotes, most recent first.

    ``authorId=me`` resolves to the caller.
    """
    viewer_id = UUID(str(user.id))
    resolved_author_id = None
    if author_id:
        if author_id == "me":
            resolved_author_id = viewer_id
        else:
            try:
                resolved_author_id = UUID(author_id)
            except ValueError as e:
                raise ValidationFailedError(
                    details={"authorId": "must be a UUID or \"me\""}
                ) from e

    result = await quote_service.list_quotes(
        page=page,
        limit=limit,
        search=search.strip() if search and search.strip() else None,
        author_id=resolved_author_id,
        category_id=category_id,
        author_profile_id=author_profile_id,
        viewer_id=viewer_id,
    )
    return envelope(_quote_page(result))


@router.get("/{slug}", summary="Get quote")
async def get_quote(
    slug: str,
    user: OptionalUser,
    quote_service: QuoteServiceDep,
) -> dict[str, Any]:
    quote = await quote_service.require_by_slug(slug)
    viewer_id = UUID(str(user.id)) if user else None
    response = await quote_service.to_response(quote, viewer_id)
    return envelope(response.dump())


@router.patch("/{slug}", summary="Update quote")
async def update_quote(
    slug: str,
    data: UpdateQuoteRequest,
    user: AuthorUser,
    quote_service: QuoteServiceDep,
) -> dict[str, Any]:
    quote = await quote_service.update(slug, data, user)
    response = await quote_service.to_response(quote, UUID(str(user.id)))
    return envelope(response.dump())


@router.delete("/{slug}", summary="Delete quote")
async def delete_quote(
    slug: str,
    user: AuthorUser,
    quote_service: QuoteServiceDep,
    comment_service: CommentServiceDep,
) -> dict[str, Any]:
    quote = await quote_service.delete(slug, user)
    await comment_service.delete_for_quote(quote.id)
    return envelope({"id": str(quote.id), "deleted": True})


# ==============================================================================
# Likes and bookmarks
# ==============================================================================


@router.post("/{slug}/like", summary="Toggle like")
async def toggle_like(
    slug: str, user: CurrentUser, quote_service: QuoteServiceDep
) -> dict[str, Any]:
    result = await quote_service.toggle_like(slug, UUID(str(user.id)))
    return envelope(LikeResponse(liked=result.active, likes=result.count).dump())


@router.get("/{slug}/like", summary="Like status")
async def like_status(
    slug: str, user: CurrentUser, quote_service: QuoteServiceDep
) -> dict[str, Any]:
    result = await quote_service.like_status(slug, UUID(str(user.id)))
    return envelope(LikeResponse(liked=result.active, likes=result.count).dump())


@router.post("/{slug}/bookmark", summary="Toggle bookmark")
async def toggle_bookmark(
    slug: str, user: CurrentUser, quote_service: QuoteServiceDep
) -> dict[str, Any]:
    result = await quote_service.toggle_bookmark(slug, UUID(str(user.id)))
    return envelope(
        BookmarkResponse(bookmarked=result.active, bookmarks=result.count).dump()
    )


@router.get("/{slug}/bookmark", summary="Bookmark status")
async def bookmark_status(
    slug: str, user: CurrentUser, quote_service: QuoteServiceDep
) -> dict[str, Any]:
    result = await quote_service.bookmark_status(slug, UUID(str(user.id)))
    return envelope(
        BookmarkResponse(bookmarked=result.active, bookmarks=result.count).dump()
    )


@users_router.get("/me/bookmarks", summary="My bookmarked quotes")
async def list_my_bookmarks(
    user: CurrentUser,
    quote_service: QuoteServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_QUOTES_LIMIT, ge=1, le=MAX_QUOTES_LIMIT),
) -> dict[str, Any]:
    result = await quote_service.list_bookmarks(UUID(str(user.id)), page, limit)
    return envelope(result.to_dict([item.dump() for item in result.items]))


# ==============================================================================
# Images
# ==============================================================================


@router.post("/{slug}/images", summary="Attach gallery images")
async def add_images(
    slug: str,
    data: AddQuoteImagesRequest,
    user: CurrentUser,
    quote_service: QuoteServiceDep,
) -> dict[str, Any]:
    images = await quote_service.add_images(slug, data.images, user)
    return envelope({"images": [image.dump() for image in images]})


@router.delete("/{slug}/images", summary="Detach a gallery image")
async def remove_image(
    slug: str,
    data: RemoveQuoteImageRequest,
    user: CurrentUser,
    quote_service: QuoteServiceDep,
) -> dict[str, Any]:
    images = await quote_service.remove_image(slug, data.public_id, user)
    return envelope({"images": [image.dump() for image in images]})
