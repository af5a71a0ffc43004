"""Email notification service (SendGrid)."""

import logging
from typing import Any

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


class NotificationService:
    """Sends transactional email."""

    def __init__(self) -> None:
        self._http_client: httpx.AsyncClient | None = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str | None = None,
    ) -> bool:
        """Send an email via SendGrid.

        Returns:
            bool: True if sent successfully, False when email is not
            configured or delivery failed
        """
        if not settings.sendgrid_api_key:
            logger.info("Email not configured; skipping '%s' to %s", subject, to_email)
            return False

        headers = {
            "Authorization": f"Bearer {settings.sendgrid_api_key}",
            "Content-Type": "application/json",
        }
        payload: dict[str, Any] = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": {
                "email": settings.email_from_address,
                "name": settings.email_from_name,
            },
            "subject": subject,
            "content": [{"type": "text/html", "value": html_content}],
        }
        if text_content:
            payload["content"].insert(0, {"type": "text/plain", "value": text_content})

        try:
            response = await self.http_client.post(SENDGRID_SEND_URL, headers=headers, json=payload)
        except httpx.HTTPError as e:
            logger.error("Email delivery to %s failed: %s", to_email, e)
            return False

        if response.status_code not in (200, 202):
            logger.error(
                "Email delivery to %s rejected: %s %s",
                to_email,
                response.status_code,
                response.text,
            )
            return False
        return True

    async def send_password_reset(self, to_email: str, reset_url: str) -> bool:
        """Email a password reset link."""
        text = (
            "You are receiving this email because you (or someone else) has requested "
            f"the reset of a password. Open this link to choose a new one:\n\n{reset_url}"
        )
        html = f"""
        <div style="font-family: Arial, sans-serif; padding: 20px;">
          <h2>Password Reset Request</h2>
          <p>You (or someone else) requested a password reset for your account.</p>
          <p><a href="{reset_url}">Reset Password</a></p>
          <p style="color: #666;">If you didn't request this, you can ignore this email.</p>
        </div>
        """
        return await self.send_email(
            to_email=to_email,
            subject="Password Reset Token",
            html_content=html,
            text_content=text,
        )


notification_service = NotificationService()
