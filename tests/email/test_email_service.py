"""Tests for the Gmail-backed email service."""

import base64
from email import message_from_bytes
from unittest.mock import MagicMock, patch

import pytest

from gulfquotes.email.schemas import EmailRecipient, EmailTag, SendEmailRequest
from gulfquotes.email.service import EmailService


def decode(message: dict):
    return message_from_bytes(base64.urlsafe_b64decode(message["raw"]))


@pytest.fixture
def email_service() -> EmailService:
    return EmailService(
        credentials_path="/fake/path.json",
        sender_address="notifications@gulfquotes.com",
        site_url="https://gulfquotes.com",
    )


class TestCreateMessage:
    def test_headers_and_tags(self, email_service) -> None:
        request = SendEmailRequest(
            to=[EmailRecipient(email="ana@example.com", name="Ana")],
            subject="Hello",
            body_html="<p>Hi</p>",
            body_text="Hi",
            tags=[EmailTag(name="type", value="new_quote")],
        )

        parsed = decode(email_service._create_message(request))

        assert parsed["From"] == "Gulfquotes <notifications@gulfquotes.com>"
        assert parsed["To"] == "Ana <ana@example.com>"
        assert parsed["Subject"] == "Hello"
        assert parsed["X-Tag-type"] == "new_quote"
        assert [p.get_content_type() for p in parsed.get_payload()] == [
            "text/plain",
            "text/html",
        ]

    def test_html_only(self, email_service) -> None:
        request = SendEmailRequest(
            to=[EmailRecipient(email="ana@example.com")],
            subject="Hello",
            body_html="<p>Hi</p>",
        )

        parsed = decode(email_service._create_message(request))

        assert parsed["To"] == "ana@example.com"
        assert [p.get_content_type() for p in parsed.get_payload()] == ["text/html"]


class TestSendEmail:
    @pytest.mark.asyncio
    async def test_disabled_service(self) -> None:
        service = EmailService(
            credentials_path="/fake/path.json",
            sender_address="notifications@gulfquotes.com",
            enabled=False,
        )

        with patch.object(EmailService, "_send") as send:
            result = await service.send_new_quote_email(
                to="ana@example.com",
                user_name="Ana",
                author_name="Rumi",
                author_slug="rumi",
                quote_slug="q",
                quote_content="Q",
            )

        assert result.success is False
        assert result.error == "Email service disabled"
        send.assert_not_called()

    @pytest.mark.asyncio
    async def test_success(self, email_service) -> None:
        with patch.object(
            EmailService, "_send", return_value={"id": "msg123", "threadId": "t1"}
        ):
            result = await email_service.send_email(
                SendEmailRequest(
                    to=[EmailRecipient(email="ana@example.com")],
                    subject="Hello",
                    body_html="<p>Hi</p>",
                )
            )

        assert result.success is True
        assert result.message_id == "msg123"
        assert result.thread_id == "t1"

    @pytest.mark.asyncio
    async def test_missing_credentials(self, email_service) -> None:
        result = await email_service.send_email(
            SendEmailRequest(
                to=[EmailRecipient(email="ana@example.com")],
                subject="Hello",
                body_html="<p>Hi</p>",
            )
        )

        assert result.success is False
        assert "credentials file missing" in result.error

    @pytest.mark.asyncio
    async def test_unexpected_error(self, email_service) -> None:
        with patch.object(EmailService, "_send", side_effect=RuntimeError("boom")):
            result = await email_service.send_email(
                SendEmailRequest(
                    to=[EmailRecipient(email="ana@example.com")],
                    subject="Hello",
                    body_html="<p>Hi</p>",
                )
            )

        assert result.success is False
        assert result.error == "Unexpected error: boom"


class TestNewQuoteEmail:
    @pytest.mark.asyncio
    async def test_builds_request(self, email_service) -> None:
        with patch.object(EmailService, "send_email") as send_email:
            send_email.return_value = MagicMock(success=True)
            await email_service.send_new_quote_email(
                to="ana@example.com",
                user_name=None,
                author_name="Rumi",
                author_slug="rumi",
                quote_slug="what-you-seek",
                quote_content="What you seek is seeking you.",
                tags=[EmailTag(name="author", value="Rumi")],
            )

        request = send_email.call_args.args[0]
        assert request.subject == "New quote from Rumi"
        assert request.to[0].email == "ana@example.com"
        assert "Hello, there!" in request.body_text
        assert "https://gulfquotes.com/quotes/what-you-seek" in request.body_html
        assert [t.value for t in request.tags] == ["Rumi"]
