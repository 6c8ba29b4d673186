"""FastAPI dependencies for notifications."""

from typing import Annotated

from fastapi import Depends, Request

from gulfquotes.core.dependencies import service_from_state

from .service import NotificationService


def get_notification_service(request: Request) -> NotificationService:
    """Get NotificationService from app state."""
    return service_from_state(request, "notification_service")


NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
