"""FastAPI application entry point.

Wiring only: logging, telemetry, lifespan, exception handlers, middleware,
routers. See app.core.lifespan and app.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and clear
the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api.v1 import api_router
from app.core.config import get_settings
from app.core.exception_handlers import register_exception_handlers
from app.core.lifespan import create_lifespan
from app.core.limiter import limiter
from app.middleware import RequestIDMiddleware
from app.shared.telemetry.logging import setup_logging
from app.shared.telemetry.telemetry import TelemetryConfig, set_telemetry


def _setup_telemetry(app: FastAPI) -> None:
    """Install the tracer provider and instrument the app (middleware must precede startup)."""
    settings = get_settings()
    if not settings.telemetry_enabled:
        set_telemetry(None)
        return
    telemetry = TelemetryConfig(
        service_name=settings.app_name,
        service_version=settings.app_version,
        enabled=True,
        environment=settings.telemetry_environment,
    )
    telemetry.setup_telemetry(
        exporter_type=settings.telemetry_exporter,
        otlp_endpoint=settings.telemetry_otlp_endpoint,
        sample_rate=settings.telemetry_sample_rate,
    )
    set_telemetry(telemetry)
    telemetry.instrument_fastapi(app)


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # First added = innermost. Request ID wraps CORS so every response carries it.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    _setup_telemetry(app)

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
