"""Comment and reply API endpoints.

Provides routes for:
- Listing and creating comments of a quote
- Listing and creating replies of a comment
- Editing and deleting comments and replies (owner or AUTHOR/ADMIN)
- Like toggles
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query, status

from gulfquotes.auth.dependencies import CurrentUser, OptionalUser
from gulfquotes.core.errors import envelope
from gulfquotes.core.logging import get_logger
from gulfquotes.notifications.dependencies import NotificationServiceDep
from gulfquotes.notifications.models import NotificationType
from gulfquotes.quotes.dependencies import QuoteServiceDep

from .dependencies import CommentServiceDep
from .schemas import (
    DEFAULT_COMMENTS_LIMIT,
    DEFAULT_REPLIES_LIMIT,
    MAX_COMMENTS_LIMIT,
    CommentSortBy,
    ContentRequest,
    LikeResponse,
)


logger = get_logger(__name__)

router = APIRouter(tags=["comments"])


# ==============================================================================
# Quote comments
# ==============================================================================


@router.get("/api/quotes/{slug}/comments", summary="List comments")
async def list_comments(
    slug: str,
    user: OptionalUser,
    quote_service: QuoteServiceDep,
    comment_service: CommentServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_COMMENTS_LIMIT, ge=1, le=MAX_COMMENTS_LIMIT),
    sort_by: CommentSortBy = Query(CommentSortBy.RECENT, alias="sortBy"),
) -> dict[str, Any]:
    quote = await quote_service.require_by_slug(slug)
    result = await comment_service.list_comments(
        quote.id,
        page=page,
        limit=limit,
        sort_by=sort_by,
        viewer_id=UUID(str(user.id)) if user else None,
    )
    return envelope(result.to_dict([item.dump() for item in result.items]))


@router.post(
    "/api/quotes/{slug}/comments",
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
async def create_comment(
    slug: str,
    data: ContentRequest,
    user: CurrentUser,
    quote_service: QuoteServiceDep,
    comment_service: CommentServiceDep,
) -> dict[str, Any]:
    quote = await quote_service.require_by_slug(slug)
    comment = await comment_service.create_comment(quote.id, user, data.content)
    return envelope(comment.dump())


# ==============================================================================
# Replies
# ==============================================================================


@router.get("/api/quotes/{slug}/comments/{comment_id}/replies", summary="List replies")
async def list_replies(
    slug: str,
    comment_id: UUID,
    user: OptionalUser,
    quote_service: QuoteServiceDep,
    comment_service: CommentServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_REPLIES_LIMIT, ge=1, le=MAX_COMMENTS_LIMIT),
) -> dict[str, Any]:
    quote = await quote_service.require_by_slug(slug)
    result = await comment_service.list_replies(
        quote.id,
        comment_id,
        page=page,
        limit=limit,
        viewer_id=UUID(str(user.id)) if user else None,
    )
    return envelope(result.to_dict([item.dump() for item in result.items]))


@router.post(
    "/api/quotes/{slug}/comments/{comment_id}/replies",
    status_code=status.HTTP_201_CREATED,
    summary="Create reply",
)
async def create_reply(
    slug: str,
    comment_id: UUID,
    data: ContentRequest,
    user: CurrentUser,
    quote_service: QuoteServiceDep,
    comment_service: CommentServiceDep,
    notification_service: NotificationServiceDep,
) -> dict[str, Any]:
    """Reply to a comment and notify the comment's author."""
    quote = await quote_service.require_by_slug(slug)
    reply, comment = await comment_service.create_reply(
        quote.id, comment_id, user, data.content
    )

    if str(comment.user_id) != str(user.id):
        try:
            await notification_service.create(
                user_id=comment.user_id,
                notification_type=NotificationType.COMMENT_REPLY,
                title="New Reply",
                message=f"{user.name or 'Someone'} replied to your comment",
                quote_id=quote.id,
                actor_id=UUID(str(user.id)),
            )
        except Exception as e:
            logger.warning(
                "reply_notification_failed",
                reply_id=str(reply.id),
                error=str(e),
            )

    return envelope(reply.dump())


# ==============================================================================
# Item-level routes
# ==============================================================================


@router.patch("/api/comments/{comment_id}", summary="Update comment")
async def update_comment(
    comment_id: UUID,
    data: ContentRequest,
    user: CurrentUser,
    comment_service: CommentServiceDep,
) -> dict[str, Any]:
    comment = await comment_service.update_comment(comment_id, user, data.content)
    return envelope(comment.dump())


@router.delete("/api/comments/{comment_id}", summary="Delete comment")
async def delete_comment(
    comment_id: UUID,
    user: CurrentUser,
    comment_service: CommentServiceDep,
) -> dict[str, Any]:
    comment = await comment_service.delete_comment(comment_id, user)
    return envelope(comment.dump())


@router.post("/api/comments/{comment_id}/like", summary="Toggle comment like")
async def toggle_comment_like(
    comment_id: UUID,
    user: CurrentUser,
    comment_service: CommentServiceDep,
) -> dict[str, Any]:
    result = await comment_service.toggle_comment_like(comment_id, UUID(str(user.id)))
    return envelope(LikeResponse(liked=result.active, likes=result.count).dump())


@router.patch("/api/replies/{reply_id}", summary="Update reply")
async def update_reply(
    reply_id: UUID,
    data: ContentRequest,
    user: CurrentUser,
    comment_service: CommentServiceDep,
) -> dict[str, Any]:
    reply = await comment_service.update_reply(reply_id, user, data.content)
    return envelope(reply.dump())


@router.delete("/api/replies/{reply_id}", summary="Delete reply")
async def delete_reply(
    reply_id: UUID,
    user: CurrentUser,
    comment_service: CommentServiceDep,
) -> dict[str, Any]:
    reply = await comment_service.delete_reply(reply_id, user)
    return envelope(reply.dump())


@router.post("/api/replies/{reply_id}/like", summary="Toggle reply like")
async def toggle_reply_like(
    reply_id: UUID,
    user: CurrentUser,
    comment_service: CommentServiceDep,
) -> dict[str, Any]:
    result = await comment_service.toggle_reply_like(reply_id, UUID(str(user.id)))
    return envelope(LikeResponse(liked=result.active, likes=result.count).dump())
