"""Current-user endpoints."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter

from gulfquotes.auth.dependencies import CurrentUser, UserServiceDep
from gulfquotes.auth.schemas import (
    UpdateNotificationPreferencesRequest,
    UserProfileResponse,
)
from gulfquotes.core.errors import NotFoundError, envelope


router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", summary="Current user profile")
async def get_me(user: CurrentUser, user_service: UserServiceDep) -> dict[str, Any]:
    profile = await user_service.get_user(UUID(str(user.id)))
    if not profile:
        raise NotFoundError("User not found")
    return envelope(UserProfileResponse.from_user(profile).dump())


@router.patch(
    "/me/notification-preferences",
    summary="Update email notification preferences",
)
async def update_notification_preferences(
    data: UpdateNotificationPreferencesRequest,
    user: CurrentUser,
    user_service: UserServiceDep,
) -> dict[str, Any]:
    profile = await user_service.update_notification_preferences(
        UUID(str(user.id)), data
    )
    return envelope(UserProfileResponse.from_user(profile).dump())
