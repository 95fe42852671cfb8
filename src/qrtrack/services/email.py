"""Email service for sending one-time codes."""

import logging
from abc import ABC, abstractmethod
from email.message import EmailMessage
from enum import StrEnum

import aiosmtplib
import httpx

from qrtrack.config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when a backend could not hand the message off for delivery."""

    pass


class CodePurpose(StrEnum):
    VERIFICATION = "verification"
    PASSWORD_RESET = "password_reset"


class EmailBackend(ABC):
    """Abstract base class for email backends."""

    @abstractmethod
    async def send(self, to: str, subject: str, text: str, html: str | None = None) -> None:
        """Send an email.

        Raises:
            EmailDeliveryError: If the message could not be sent
        """


class ConsoleEmailBackend(EmailBackend):
    """Email backend that logs to console (for development)."""

    async def send(self, to: str, subject: str, text: str, html: str | None = None) -> None:
        logger.info(
            f"\n{'=' * 60}\n"
            f"EMAIL (console backend - not sent)\n"
            f"To: {to}\n"
            f"Subject: {subject}\n"
            f"{'=' * 60}\n"
            f"{text}\n"
            f"{'=' * 60}\n"
        )


class SMTPEmailBackend(EmailBackend):
    """Email backend using SMTP (e.g. a Gmail app password)."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        from_address: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address or username

    async def send(self, to: str, subject: str, text: str, html: str | None = None) -> None:
        message = EmailMessage()
        message["From"] = self.from_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        if html:
            message.add_alternative(html, subtype="html")

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                start_tls=self.use_tls,
                timeout=30,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email via SMTP to {to}: {e}")
            raise EmailDeliveryError(str(e)) from e
        logger.info(f"Email sent via SMTP to {to}")


class ResendEmailBackend(EmailBackend):
    """Email backend using the Resend API."""

    def __init__(self, api_key: str, from_address: str):
        self.api_key = api_key
        self.from_address = from_address

    async def send(self, to: str, subject: str, text: str, html: str | None = None) -> None:
        payload = {"from": self.from_address, "to": [to], "subject": subject, "text": text}
        if html:
            payload["html"] = html

        async with httpx.AsyncClient(timeout=30.0) as client:
            try:
                response = await client.post(
                    "https://api.resend.com/emails",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(f"Resend API error: {e.response.status_code} - {e.response.text}")
                raise EmailDeliveryError(f"Resend returned {e.response.status_code}") from e
            except httpx.HTTPError as e:
                logger.error(f"Failed to send email via Resend to {to}: {e}")
                raise EmailDeliveryError(str(e)) from e
        logger.info(f"Email sent via Resend to {to}")


def get_email_backend() -> EmailBackend:
    """Get the configured email backend."""
    if settings.email_backend == "console":
        return ConsoleEmailBackend()
    elif settings.email_backend == "smtp":
        return SMTPEmailBackend(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            from_address=settings.email_from,
        )
    elif settings.email_backend == "resend":
        return ResendEmailBackend(
            api_key=settings.resend_api_key,
            from_address=settings.email_from,
        )
    else:
        raise ValueError(f"Unknown email backend: {settings.email_backend}")


_SUBJECTS = {
    CodePurpose.VERIFICATION: "Verify your email",
    CodePurpose.PASSWORD_RESET: "Reset your password",
}

_INTROS = {
    CodePurpose.VERIFICATION: "Your 6-digit verification code is:",
    CodePurpose.PASSWORD_RESET: "Your 6-digit password reset code is:",
}


class EmailService:
    """High-level email service for sending application emails."""

    def __init__(self, backend: EmailBackend | None = None):
        self._backend = backend

    @property
    def backend(self) -> EmailBackend:
        """Lazy-load the backend."""
        if self._backend is None:
            self._backend = get_email_backend()
        return self._backend

    async def send_code(
        self,
        to: str,
        code: str,
        purpose: CodePurpose = CodePurpose.VERIFICATION,
    ) -> None:
        """Send a one-time code.

        Raises:
            EmailDeliveryError: If the backend failed to send
        """
        minutes = settings.code_expiration_minutes
        text = f"{_INTROS[purpose]} {code}\n\nThis code will expire in {minutes} minutes."
        html = f"""
<div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 480px; margin: 0 auto; padding: 20px;">
    <p>{_INTROS[purpose]}</p>
    <p style="font-size: 28px; font-weight: 600; letter-spacing: 6px;">{code}</p>
    <p style="color: #666; font-size: 14px;">This code will expire in {minutes} minutes.
    If you didn't request it, you can safely ignore this email.</p>
</div>
"""
        await self.backend.send(to=to, subject=_SUBJECTS[purpose], text=text, html=html)


# Global email service instance
email_service = EmailService()
