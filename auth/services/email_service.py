"""Email delivery service."""

from __future__ import annotations

import logging

import httpx

from auth.config import AuthConfig

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"


class EmailService:
    """Sends verification and password reset links through Resend."""

    def __init__(
        self,
        config: AuthConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or AuthConfig()
        self._transport = transport

    def verification_url(self, token: str) -> str:
        return f"{self._config.API_URL}/auth/verify-email/{token}"

    def reset_url(self, token: str) -> str:
        return f"{self._config.WEB_URL}/reset-password?token={token}"

    async def send_verification_link(self, email: str, token: str) -> bool:
        url = self.verification_url(token)
        hours = self._config.EMAIL_VERIFICATION_EXPIRE_HOURS
        html = (
            "<p>Thanks for signing up! Confirm your email address to activate your account.</p>"
            f'<p><a href="{url}">Verify email</a></p>'
            f"<p>Or paste this link into your browser: {url}</p>"
            f"<p>This link expires in {hours} hours.</p>"
        )
        return await self._send(email, "Verify your email", html)

    async def send_password_reset_link(self, email: str, token: str) -> bool:
        url = self.reset_url(token)
        minutes = self._config.PASSWORD_RESET_EXPIRE_MINUTES
        html = (
            "<p>We received a request to reset your password.</p>"
            f'<p><a href="{url}">Reset password</a></p>'
            f"<p>Or paste this link into your browser: {url}</p>"
            f"<p>This link expires in {minutes} minutes. "
            "If you did not ask for a reset, ignore this email.</p>"
        )
        return await self._send(email, "Reset your password", html)

    async def _send(self, email: str, subject: str, html: str) -> bool:
        if self._config.EMAIL_PROVIDER != "resend":
            logger.warning("Email provider %s not supported", self._config.EMAIL_PROVIDER)
            return False
        if not self._config.RESEND_API_KEY:
            logger.warning("RESEND_API_KEY not set, email to %s not sent", email)
            return False

        payload = {
            "from": f"{self._config.EMAIL_FROM_NAME} <{self._config.EMAIL_FROM_ADDRESS}>",
            "to": [email],
            "subject": subject,
            "html": html,
        }
        headers = {"Authorization": f"Bearer {self._config.RESEND_API_KEY}"}

        try:
            async with httpx.AsyncClient(
                timeout=self._config.EMAIL_TIMEOUT_SECONDS,
                transport=self._transport,
            ) as client:
                response = await client.post(RESEND_URL, headers=headers, json=payload)
        except httpx.HTTPError:
            logger.exception("Email delivery to %s failed", email)
            return False
        if response.status_code != 200:
            logger.warning("Email delivery to %s rejected: %s", email, response.status_code)
            return False
        return True
