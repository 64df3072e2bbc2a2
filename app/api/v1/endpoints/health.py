"""Health check endpoints for liveness and readiness checks."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.infrastructure.persistence.database import session_scope
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return ok status and version for liveness."""
    return HealthResponse(version=get_settings().app_version)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Database unreachable", "model": ReadinessErrorResponse}},
)
async def readiness_check() -> ReadinessResponse | JSONResponse:
    """Return 200 if the database answers a trivial query; 503 otherwise."""
    try:
        async with session_scope() as db:
            await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(
                status="not_ready",
                message="Database unreachable",
            ).model_dump(),
        )
    return ReadinessResponse()
