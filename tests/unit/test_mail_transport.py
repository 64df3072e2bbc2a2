"""Mail transports: SendGrid request shape and error mapping (httpx.MockTransport)."""

import json

import httpx
import pytest

from app.core.config import Settings
from app.domain.exceptions import NotificationDeliveryException
from app.infrastructure.services import (
    LogOnlyMailTransport,
    SendGridMailTransport,
    build_mail_transport,
)

API_URL = "https://sendgrid.test/v3/mail/send"


def _transport(handler) -> SendGridMailTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SendGridMailTransport(
        "sg-key", "noreply@example.com", "Taskflow", api_url=API_URL, http_client=client
    )


async def test_sendgrid_posts_v3_payload() -> None:
    """One personalization, HTML content, bearer auth."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    await _transport(handler).send("bob@example.com", "Task Updated: Plan", "<p>hi</p>")

    (request,) = seen
    assert str(request.url) == API_URL
    assert request.headers["Authorization"] == "Bearer sg-key"
    body = json.loads(request.content)
    assert body["personalizations"] == [{"to": [{"email": "bob@example.com"}]}]
    assert body["from"] == {"email": "noreply@example.com", "name": "Taskflow"}
    assert body["subject"] == "Task Updated: Plan"
    assert body["content"] == [{"type": "text/html", "value": "<p>hi</p>"}]


async def test_sendgrid_error_status_raises() -> None:
    transport = _transport(lambda request: httpx.Response(401, text="bad key"))
    with pytest.raises(NotificationDeliveryException) as exc_info:
        await transport.send("bob@example.com", "s", "b")
    assert exc_info.value.details == {"channel": "email"}
    assert "401" in exc_info.value.message


async def test_sendgrid_network_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NotificationDeliveryException):
        await _transport(handler).send("bob@example.com", "s", "b")


async def test_log_only_transport_sends_nothing() -> None:
    await LogOnlyMailTransport().send("bob@example.com", "subject", "<p>body</p>")


def _settings(**overrides) -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        secret_key="test",
        **overrides,
    )


def test_build_mail_transport_defaults_to_log() -> None:
    assert isinstance(build_mail_transport(_settings(mail_backend="log")), LogOnlyMailTransport)


async def test_build_mail_transport_sendgrid() -> None:
    settings = _settings(mail_backend="sendgrid", sendgrid_api_key="sg-key")
    async with httpx.AsyncClient() as client:
        transport = build_mail_transport(settings, client)
    assert isinstance(transport, SendGridMailTransport)


def test_build_mail_transport_sendgrid_requires_client() -> None:
    settings = _settings(mail_backend="sendgrid", sendgrid_api_key="sg-key")
    with pytest.raises(ValueError):
        build_mail_transport(settings)


def test_sendgrid_backend_requires_api_key() -> None:
    with pytest.raises(ValueError):
        _settings(mail_backend="sendgrid")
