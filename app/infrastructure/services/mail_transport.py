"""Outbound mail transports (IMailTransport): log-only and SendGrid v3 REST."""

from __future__ import annotations

import logging

import httpx

from app.core.config import Settings
from app.domain.exceptions import NotificationDeliveryException
from app.shared.enums import NotificationChannel
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class LogOnlyMailTransport:
    """IMailTransport implementation that logs instead of sending email.

    Default when no mail provider is configured (local runs, tests).
    """

    async def send(self, to_email: str, subject: str, html: str) -> None:
        """Log the message; no actual email sent."""
        logger.info("Mail: would send to %s (subject=%r)", to_email, (subject or "")[:80])
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Mail body (first 500 chars): %s", (html or "")[:500])


class SendGridMailTransport:
    """Sends mail through the SendGrid v3 ``mail/send`` endpoint over httpx."""

    def __init__(
        self,
        api_key: str,
        from_address: str,
        from_name: str,
        *,
        api_url: str = "https://api.sendgrid.com/v3/mail/send",
        http_client: httpx.AsyncClient,
    ) -> None:
        self._api_key = api_key
        self._from = {"email": from_address, "name": from_name}
        self._api_url = api_url
        self._http = http_client

    async def send(self, to_email: str, subject: str, html: str) -> None:
        """POST one message. Raises NotificationDeliveryException on transport or HTTP errors."""
        body = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": self._from,
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }
        try:
            resp = await self._http.post(
                self._api_url,
                json=body,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as e:
            raise NotificationDeliveryException(
                NotificationChannel.EMAIL.value, f"SendGrid request failed: {e!s}"
            ) from e
        if resp.status_code >= 400:
            raise NotificationDeliveryException(
                NotificationChannel.EMAIL.value,
                f"SendGrid returned {resp.status_code}: {resp.text[:200]}",
            )
        logger.info("Mail sent to %s via SendGrid (subject=%r)", to_email, subject[:80])


def build_mail_transport(
    settings: Settings, http_client: httpx.AsyncClient | None = None
) -> LogOnlyMailTransport | SendGridMailTransport:
    """Return the transport selected by settings.mail_backend."""
    if settings.mail_backend == "sendgrid":
        if http_client is None:
            raise ValueError("SendGrid transport requires an httpx.AsyncClient")
        return SendGridMailTransport(
            settings.sendgrid_api_key.get_secret_value(),
            settings.mail_from_address,
            settings.mail_from_name,
            api_url=settings.sendgrid_api_url,
            http_client=http_client,
        )
    return LogOnlyMailTransport()
