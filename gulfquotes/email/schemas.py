"""Pydantic schemas for email system.

Request/Response models for:
- Sending emails
- Provider tags
- Service status
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class EmailRecipient(BaseModel):
    """Email recipient with optional name."""

    email: EmailStr = Field(..., description="Recipient email address")
    name: str | None = Field(None, description="Recipient display name")


class EmailTag(BaseModel):
    """Tag attached to an outgoing email for filtering and analytics."""

    name: str = Field(..., pattern=r"^[a-zA-Z0-9_-]+$", max_length=64)
    value: str = Field(..., pattern=r"^[a-zA-Z0-9_-]+$", max_length=256)


class SendEmailRequest(BaseModel):
    """Request to send an email."""

    to: list[EmailRecipient] = Field(
        ..., min_length=1, max_length=50, description="Recipients (max 50)"
    )
    subject: str = Field(..., min_length=1, max_length=998, description="Email subject")
    body_html: str = Field(..., min_length=1, description="HTML body content")
    body_text: str | None = Field(None, description="Plain text body (fallback)")
    reply_to: EmailStr | None = Field(None, description="Reply-to address")
    tags: list[EmailTag] = Field(default_factory=list, max_length=10)


class SendEmailResponse(BaseModel):
    """Response after sending an email."""

    model_config = ConfigDict(from_attributes=True)

    success: bool = Field(..., description="Whether the email was sent successfully")
    message_id: str | None = Field(None, description="Gmail message ID")
    thread_id: str | None = Field(None, description="Gmail thread ID")
    error: str | None = Field(None, description="Error message if failed")


class EmailStatusResponse(BaseModel):
    """Email service and notification dispatcher status."""

    enabled: bool = Field(..., description="Whether email service is enabled")
    configured: bool = Field(..., description="Whether email service is configured")
    sender_address: str | None = Field(None, description="Configured sender address")
    dispatcher: dict | None = Field(None, description="Notification email counters")
