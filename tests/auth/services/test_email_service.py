import aiosmtplib
import pytest

from taekwondo_api.auth.services import email_service as email_module
from taekwondo_api.auth.services.email_service import (
    ConsoleEmailService,
    SMTPEmailService,
    build_contact_notification_email,
    build_password_reset_email,
)
from taekwondo_api.core.config import settings


def _smtp_service(port: int = 587) -> SMTPEmailService:
    return SMTPEmailService(
        smtp_host="smtp.example.com",
        smtp_port=port,
        username="mailer",
        password="secret",
        from_email="noreply@example.com",
        from_name="Federation",
    )


class TestEmailBuilders:
    def test_reset_email_links_to_frontend(self):
        message = build_password_reset_email(name="Ravi", email="ravi@example.com", token="abc123")

        assert message.to == "ravi@example.com"
        assert message.subject == "Password Reset Request"
        assert f"{settings.FRONTEND_URL}/reset-password/abc123" in message.body_text
        assert f"{settings.FRONTEND_URL}/reset-password/abc123" in message.body_html

    def test_contact_notification_escapes_html(self):
        message = build_contact_notification_email(
            admin_email="admin@example.com",
            sender_name="<script>x</script>",
            sender_email="s@example.com",
            subject="Hello",
            message="Line one",
            enquiry_type="general",
        )

        assert message.to == "admin@example.com"
        assert message.subject == "New Contact Form Submission: Hello"
        assert "<script>" not in message.body_html
        assert "&lt;script&gt;" in message.body_html


class TestEmailServices:
    @pytest.mark.asyncio
    async def test_console_service_always_succeeds(self):
        message = build_password_reset_email(name="A", email="a@example.com", token="t")

        assert await ConsoleEmailService().send_email(message) is True

    @pytest.mark.asyncio
    async def test_smtp_service_uses_starttls_on_submission_port(self, monkeypatch):
        calls = []

        async def fake_send(msg, **kwargs):
            calls.append(kwargs)

        monkeypatch.setattr(email_module.aiosmtplib, "send", fake_send)
        message = build_password_reset_email(name="A", email="a@example.com", token="t")

        assert await _smtp_service(587).send_email(message) is True
        assert calls[0]["start_tls"] is True
        assert calls[0]["use_tls"] is False

    @pytest.mark.asyncio
    async def test_smtp_service_uses_implicit_tls_on_465(self, monkeypatch):
        calls = []

        async def fake_send(msg, **kwargs):
            calls.append(kwargs)

        monkeypatch.setattr(email_module.aiosmtplib, "send", fake_send)
        message = build_password_reset_email(name="A", email="a@example.com", token="t")

        await _smtp_service(465).send_email(message)

        assert calls[0]["use_tls"] is True
        assert calls[0]["start_tls"] is False

    @pytest.mark.asyncio
    async def test_smtp_service_reports_failure_without_raising(self, monkeypatch):
        async def failing_send(msg, **kwargs):
            raise aiosmtplib.SMTPException("relay denied")

        monkeypatch.setattr(email_module.aiosmtplib, "send", failing_send)
        message = build_password_reset_email(name="A", email="a@example.com", token="t")

        assert await _smtp_service().send_email(message) is False
