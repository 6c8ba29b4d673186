"""Pydantic schemas for authenticated users."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import field_validator

from gulfquotes.core.schemas import ApiModel


NOTIFICATION_TYPES = ("NEW_QUOTE", "COMMENT_REPLY", "SYSTEM")


class UserResponse(ApiModel):
    """Authenticated user as carried in the access token."""

    id: UUID
    email: str | None = None
    name: str | None = None
    image: str | None = None
    role: str


class UserProfileResponse(ApiModel):
    """Stored user profile with notification preferences."""

    id: UUID
    email: str | None = None
    name: str | None = None
    slug: str | None = None
    image: str | None = None
    role: str
    email_notifications: bool
    email_notification_types: list[str]
    created_at: datetime

    @classmethod
    def from_user(cls, user: Any) -> "UserProfileResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            slug=user.slug,
            image=user.image,
            role=user.role,
            email_notifications=user.email_notifications,
            email_notification_types=sorted(user.email_notification_types),
            created_at=user.created_at,
        )


class UpdateNotificationPreferencesRequest(ApiModel):
    """Partial update of email notification preferences."""

    email_notifications: bool | None = None
    email_notification_types: list[str] | None = None

    @field_validator("email_notification_types")
    @classmethod
    def validate_types(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        unknown = [t for t in v if t not in NOTIFICATION_TYPES]
        if unknown:
            msg = f"Unknown notification types: {', '.join(unknown)}"
            raise ValueError(msg)
        return sorted(set(v))
