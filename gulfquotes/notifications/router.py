"""Notification API endpoints.

Every route acts on the authenticated user's own notifications.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query

from gulfquotes.auth.dependencies import CurrentUser
from gulfquotes.core.errors import envelope

from .dependencies import NotificationServiceDep
from .models import NotificationFilter
from .schemas import (
    DEFAULT_NOTIFICATIONS_LIMIT,
    MAX_NOTIFICATIONS_LIMIT,
    MarkAllReadResponse,
    UnreadCountResponse,
)


router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", summary="List notifications")
async def list_notifications(
    user: CurrentUser,
    notification_service: NotificationServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_NOTIFICATIONS_LIMIT, ge=1, le=MAX_NOTIFICATIONS_LIMIT),
    filter: NotificationFilter = Query(NotificationFilter.ALL),
) -> dict[str, Any]:
    """List notifications, most recent first, with the unread count."""
    result = await notification_service.list_notifications(
        UUID(str(user.id)), page=page, limit=limit, filter=filter
    )
    return envelope(result.to_dict())


@router.get("/unread-count", summary="Get unread count")
async def get_unread_count(
    user: CurrentUser,
    notification_service: NotificationServiceDep,
) -> dict[str, Any]:
    count = await notification_service.unread_count(UUID(str(user.id)))
    return envelope(UnreadCountResponse(count=count).dump())


@router.patch("/{notification_id}/read", summary="Mark notification as read")
async def mark_as_read(
    notification_id: UUID,
    user: CurrentUser,
    notification_service: NotificationServiceDep,
) -> dict[str, Any]:
    await notification_service.mark_as_read(notification_id, UUID(str(user.id)))
    return envelope({"id": str(notification_id), "read": True})


@router.post("/read-all", summary="Mark all notifications as read")
async def mark_all_as_read(
    user: CurrentUser,
    notification_service: NotificationServiceDep,
) -> dict[str, Any]:
    count = await notification_service.mark_all_as_read(UUID(str(user.id)))
    return envelope(MarkAllReadResponse(count=count).dump())


@router.delete("/{notification_id}", summary="Delete notification")
async def delete_notification(
    notification_id: UUID,
    user: CurrentUser,
    notification_service: NotificationServiceDep,
) -> dict[str, Any]:
    await notification_service.delete(notification_id, UUID(str(user.id)))
    return envelope({"id": str(notification_id), "deleted": True})
