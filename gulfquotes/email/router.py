"""Email API endpoints.

Provides an admin-only status endpoint reporting email configuration and
the notification email dispatcher counters.
"""

from typing import Any

from fastapi import APIRouter, Request

from gulfquotes.auth.dependencies import AdminUser
from gulfquotes.config import get_settings
from gulfquotes.core.errors import envelope

from .schemas import EmailStatusResponse


admin_router = APIRouter(prefix="/api/admin/email", tags=["admin", "email"])


@admin_router.get("/status", summary="Get email service status (admin only)")
async def get_email_status(request: Request, _: AdminUser) -> dict[str, Any]:
    """Report whether email is enabled and how the dispatcher is doing."""
    settings = get_settings()
    dispatcher = getattr(request.app.state, "notification_dispatcher", None)

    response = EmailStatusResponse(
        enabled=settings.email_enabled,
        configured=settings.email_configured,
        sender_address=settings.email_sender_address
        if settings.email_configured
        else None,
        dispatcher=dispatcher.stats() if dispatcher is not None else None,
    )
    return envelope(response.model_dump())
