from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

import aiosmtplib
import structlog

from taekwondo_api.core.config import settings

logger = structlog.get_logger(__name__)

# Brand colors
_ACCENT = "#FF5722"
_BG_LIGHT = "#F9F9F9"
_TEXT = "#333333"
_TEXT_MUTED = "#666666"
_BORDER = "#DDDDDD"


@dataclass
class EmailMessage:
    to: str
    subject: str
    body_html: str
    body_text: str


class EmailService(ABC):
    @abstractmethod
    async def send_email(self, message: EmailMessage) -> bool:
        pass


class ConsoleEmailService(EmailService):
    async def send_email(self, message: EmailMessage) -> bool:
        logger.info(
            "email_console_output",
            to=message.to,
            subject=message.subject,
            body=message.body_text,
        )
        return True


class SMTPEmailService(EmailService):
    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        username: str,
        password: str,
        from_email: str,
        from_name: str,
        timeout: float = 10.0,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout

    async def send_email(self, message: EmailMessage) -> bool:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = message.to

        msg.attach(MIMEText(message.body_text, "plain"))
        msg.attach(MIMEText(message.body_html, "html"))

        # Port 465 speaks implicit TLS, everything else upgrades with STARTTLS
        implicit_tls = self.smtp_port == 465
        try:
            await aiosmtplib.send(
                msg,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.username or None,
                password=self.password or None,
                use_tls=implicit_tls,
                start_tls=not implicit_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError, TimeoutError) as e:
            logger.error("email_send_failed", to=message.to, subject=message.subject, error=str(e))
            return False

        logger.info("email_sent", to=message.to, subject=message.subject)
        return True


def get_email_service() -> EmailService:
    if settings.EMAIL_BACKEND == "smtp":
        return SMTPEmailService(
            smtp_host=settings.SMTP_HOST,
            smtp_port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            from_email=settings.SMTP_FROM_EMAIL,
            from_name=settings.SMTP_FROM_NAME,
            timeout=settings.SMTP_TIMEOUT_SECONDS,
        )
    return ConsoleEmailService()


def _wrap_html(title: str, inner: str) -> str:
    """Wrap email content in the federation template."""
    return f"""\
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="margin: 0 auto; max-width: 600px; font-family: Arial, sans-serif; line-height: 1.6; color: {_TEXT};">
  <div style="padding: 20px; border: 1px solid {_BORDER}; border-radius: 5px; background-color: {_BG_LIGHT};">
    <div style="background-color: {_ACCENT}; color: #ffffff; padding: 10px; text-align: center; border-radius: 5px 5px 0 0;">
      <h2 style="margin: 0;">{title}</h2>
    </div>
    {inner}
    <div style="font-size: 12px; color: {_TEXT_MUTED}; margin-top: 20px;">
      <p>{settings.SMTP_FROM_NAME}</p>
    </div>
  </div>
</body>
</html>"""


def build_password_reset_email(name: str, email: str, token: str) -> EmailMessage:
    reset_url = f"{settings.FRONTEND_URL}/reset-password/{token}"
    minutes = settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES

    inner = f"""\
<p>Hello {escape(name)},</p>
<p>You are receiving this email because you (or someone else) has requested a password reset
for your {settings.SMTP_FROM_NAME} account.</p>
<p>Click the button below to reset your password:</p>
<p style="text-align: center;">
  <a href="{reset_url}"
     style="display: inline-block; background-color: {_ACCENT}; color: #ffffff; padding: 12px 24px;
            text-decoration: none; border-radius: 4px; margin: 20px 0; font-weight: bold;">
    Reset Password
  </a>
</p>
<p>This link will expire in {minutes} minutes.</p>
<p>If you did not request this, please ignore this email and your password will remain unchanged.</p>"""

    text_body = f"""\
Hello {name},

You are receiving this email because you (or someone else) has requested a password reset for your {settings.SMTP_FROM_NAME} account.

Click the link below to reset your password:
{reset_url}

This link will expire in {minutes} minutes.

If you did not request this, please ignore this email and your password will remain unchanged."""

    return EmailMessage(
        to=email,
        subject="Password Reset Request",
        body_html=_wrap_html("Password Reset Request", inner),
        body_text=text_body,
    )


def build_contact_notification_email(
    admin_email: str,
    sender_name: str,
    sender_email: str,
    subject: str,
    message: str,
    enquiry_type: str,
) -> EmailMessage:
    inner = f"""\
<p>You have received a new contact form submission.</p>
<p><strong>From:</strong> {escape(sender_name)} ({escape(sender_email)})</p>
<p><strong>Enquiry type:</strong> {escape(enquiry_type)}</p>
<p><strong>Subject:</strong> {escape(subject)}</p>
<p style="white-space: pre-line;">{escape(message)}</p>"""

    text_body = f"""\
You have received a new contact form submission from {sender_name} ({sender_email}).

Enquiry type: {enquiry_type}
Subject: {subject}

{message}"""

    return EmailMessage(
        to=admin_email,
        subject=f"New Contact Form Submission: {subject}",
        body_html=_wrap_html("New Contact Message", inner),
        body_text=text_body,
    )
