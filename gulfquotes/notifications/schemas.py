"""Pydantic schemas for notifications."""

from datetime import datetime
from typing import Any
from uuid import UUID

from gulfquotes.core.pagination import Page
from gulfquotes.core.schemas import ApiModel

from .models import Notification, NotificationType


DEFAULT_NOTIFICATIONS_LIMIT = 10
MAX_NOTIFICATIONS_LIMIT = 50


class NotificationResponse(ApiModel):
    id: UUID
    user_id: UUID
    type: NotificationType
    title: str
    message: str
    quote_id: UUID | None = None
    author_profile_id: UUID | None = None
    actor_id: UUID | None = None
    read: bool
    read_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            user_id=notification.user_id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            quote_id=notification.quote_id,
            author_profile_id=notification.author_profile_id,
            actor_id=notification.actor_id,
            read=notification.read,
            read_at=notification.read_at,
            created_at=notification.created_at,
        )


class NotificationPage(Page[NotificationResponse]):
    """A page of notifications plus the recipient's unread count."""

    def __init__(self, items, total, page, limit, unread_count: int = 0):
        super().__init__(items=items, total=total, page=page, limit=limit)
        self.unread_count = unread_count

    def to_dict(self, items: list[Any] | None = None) -> dict[str, Any]:
        data = super().to_dict([n.dump() for n in self.items] if items is None else items)
        data["unreadCount"] = self.unread_count
        return data


class UnreadCountResponse(ApiModel):
    count: int


class MarkAllReadResponse(ApiModel):
    count: int
