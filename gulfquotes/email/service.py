"""Email service using Gmail API with Service Account.

Uses domain-wide delegation to send emails on behalf of a Google Workspace user.
The service account must have domain-wide delegation enabled in Google Admin Console.

Required Google Admin Console setup:
1. Go to Security > Access and data control > API controls > Domain-wide delegation
2. Add the service account client_id with scope: https://www.googleapis.com/auth/gmail.send
"""

import asyncio
import base64
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import TYPE_CHECKING

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from gulfquotes.core.logging import get_logger

from .schemas import EmailRecipient, EmailTag, SendEmailRequest, SendEmailResponse
from .templates import render_new_quote


if TYPE_CHECKING:
    from googleapiclient._apis.gmail.v1 import GmailResource


logger = get_logger(__name__)

# Gmail API scope for sending emails
GMAIL_SCOPES = ["https://www.googleapis.com/auth/gmail.send"]


class EmailService:
    """Service for sending emails via Gmail API.

    Uses a service account with domain-wide delegation to impersonate
    a Google Workspace user (e.g., notifications@gulfquotes.com).
    """

    def __init__(
        self,
        credentials_path: str,
        sender_address: str,
        sender_name: str = "Gulfquotes",
        site_url: str = "http://localhost:3000",
        enabled: bool = True,
    ):
        """Initialize Gmail API service.

        Args:
            credentials_path: Path to service account JSON file
            sender_address: Email address to send from (must be in Google Workspace)
            sender_name: Display name for sender
            site_url: Public site URL used for links in templates
            enabled: When False every send returns an unsuccessful response
        """
        self.credentials_path = credentials_path
        self.sender_address = sender_address
        self.sender_name = sender_name
        self.site_url = site_url
        self.enabled = enabled
        self._service: GmailResource | None = None

        if enabled and not Path(credentials_path).exists():
            logger.warning(
                "email_credentials_not_found",
                path=credentials_path,
                message="Gmail API will not be available",
            )

    def _get_service(self) -> "GmailResource":
        """Get or create Gmail API service.

        Lazily initialized so app startup never touches Google APIs.

        Raises:
            FileNotFoundError: If credentials file doesn't exist
        """
        if self._service is not None:
            return self._service

        credentials_file = Path(self.credentials_path)
        if not credentials_file.exists():
            msg = f"Credentials file not found: {self.credentials_path}"
            raise FileNotFoundError(msg)

        try:
            credentials = service_account.Credentials.from_service_account_file(
                str(credentials_file),
                scopes=GMAIL_SCOPES,
            )
            delegated_credentials = credentials.with_subject(self.sender_address)

            self._service = build(
                "gmail",
                "v1",
                credentials=delegated_credentials,
                cache_discovery=False,
            )

            logger.info("gmail_service_initialized", sender=self.sender_address)
            return self._service

        except Exception as e:
            logger.exception(
                "gmail_service_init_failed",
                error=str(e),
                credentials_path=self.credentials_path,
            )
            raise

    def _format_address(self, recipient: EmailRecipient) -> str:
        if recipient.name:
            return f"{recipient.name} <{recipient.email}>"
        return recipient.email

    def _create_message(self, request: SendEmailRequest) -> dict:
        """Create email message in Gmail API format.

        Returns:
            Dict with 'raw' key containing base64url encoded message
        """
        message = MIMEMultipart("alternative")

        message["From"] = f"{self.sender_name} <{self.sender_address}>"
        message["To"] = ", ".join(self._format_address(r) for r in request.to)
        message["Subject"] = request.subject

        if request.reply_to:
            message["Reply-To"] = request.reply_to

        for tag in request.tags:
            message[f"X-Tag-{tag.name}"] = tag.value

        # Plain text first, then HTML (email clients prefer last)
        if request.body_text:
            message.attach(MIMEText(request.body_text, "plain", "utf-8"))
        message.attach(MIMEText(request.body_html, "html", "utf-8"))

        raw_message = base64.urlsafe_b64encode(message.as_bytes()).decode("utf-8")
        return {"raw": raw_message}

    def _send(self, message: dict) -> dict:
        service = self._get_service()
        return service.users().messages().send(userId="me", body=message).execute()

    async def send_email(self, request: SendEmailRequest) -> SendEmailResponse:
        """Send an email via Gmail API.

        The blocking Google client call runs in a worker thread.

        Returns:
            SendEmailResponse with success status and message ID
        """
        if not self.enabled:
            logger.debug("email_disabled_skip", to=[r.email for r in request.to])
            return SendEmailResponse(success=False, error="Email service disabled")

        try:
            message = self._create_message(request)
            result = await asyncio.to_thread(self._send, message)

            logger.info(
                "email_sent",
                message_id=result.get("id"),
                thread_id=result.get("threadId"),
                to=[r.email for r in request.to],
                subject=request.subject[:50],
                tags={tag.name: tag.value for tag in request.tags},
            )

            return SendEmailResponse(
                success=True,
                message_id=result.get("id"),
                thread_id=result.get("threadId"),
            )

        except HttpError as e:
            error_message = str(e)
            logger.exception(
                "email_send_failed",
                error=error_message,
                to=[r.email for r in request.to],
                subject=request.subject[:50],
            )
            return SendEmailResponse(
                success=False,
                error=f"Gmail API error: {error_message}",
            )

        except FileNotFoundError as e:
            logger.error("email_credentials_missing", error=str(e))
            return SendEmailResponse(
                success=False,
                error="Email service not configured: credentials file missing",
            )

        except Exception as e:
            logger.exception("email_send_unexpected_error", error=str(e))
            return SendEmailResponse(
                success=False,
                error=f"Unexpected error: {e!s}",
            )

    async def send_new_quote_email(
        self,
        to: str,
        user_name: str | None,
        author_name: str,
        author_slug: str,
        quote_slug: str,
        quote_content: str,
        tags: list[EmailTag] | None = None,
    ) -> SendEmailResponse:
        """Send the "new quote from a followed author" email."""
        body_html, body_text = render_new_quote(
            user_name=user_name or "there",
            author_name=author_name,
            author_slug=author_slug,
            quote_slug=quote_slug,
            quote_content=quote_content,
            site_url=self.site_url,
        )
        request = SendEmailRequest(
            to=[EmailRecipient(email=to, name=user_name)],
            subject=f"New quote from {author_name}",
            body_html=body_html,
            body_text=body_text,
            tags=tags or [],
        )
        return await self.send_email(request)
