"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to JSON error responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import TaskflowException

logger = logging.getLogger(__name__)

# NOTIFICATION_DELIVERY_FAILED and AUDIT_WRITE_FAILED are absorbed by their
# services and fall through to 500 if they ever escape.
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "VERSION_CONFLICT": 409,
    "USER_ALREADY_EXISTS": 409,
}


def _taskflow_exception_handler(
    request: Request, exc: TaskflowException
) -> JSONResponse:
    """Return JSON from TaskflowException.to_dict() with the mapped status code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 500)
    if status == 500:
        logger.error("Unmapped domain error %s: %s", exc.error_code, exc.message)
    return JSONResponse(status_code=status, content=jsonable_encoder(exc.to_dict()))


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_encoder(exc.errors()),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: TaskflowException (and subclasses), RequestValidationError,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(TaskflowException, _taskflow_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
