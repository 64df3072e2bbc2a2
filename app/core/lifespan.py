"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring (WebSocket registry, outbound HTTP
client, mail transport, email renderer, SQLAlchemy instrumentation, DB
engine dispose). No business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: HTTP client, WebSocket manager, mail transport and
    renderer, database engine (SQLite schema is created here), SQLAlchemy
    instrumentation. Shutdown order: HTTP client close, telemetry shutdown,
    engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    # Shared HTTP client for outbound mail (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=settings.mail_timeout_seconds)

    from app.api.websocket import ConnectionManager
    from app.infrastructure.services import EmailTemplateRenderer, build_mail_transport

    app.state.ws_manager = ConnectionManager()
    app.state.mail_transport = build_mail_transport(settings, app.state.http_client)
    app.state.email_renderer = EmailTemplateRenderer(
        app_name=settings.app_name, app_url=settings.app_url
    )
    logger.info("Mail backend: %s", settings.mail_backend)

    from app.infrastructure.persistence import database

    database._ensure_engine()
    if settings.database_url.startswith("sqlite"):
        await database.create_all()
        logger.info("SQLite schema ensured")

    from app.shared.telemetry.telemetry import get_telemetry

    telemetry = get_telemetry()
    if telemetry is not None and database.engine is not None:
        telemetry.instrument_sqlalchemy(database.engine)

    yield

    # ---- Shutdown ----
    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("HTTP client closed")

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()

    await database.dispose_engine()
    logger.info("Database engine disposed")
