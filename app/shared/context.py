"""Request context management using contextvars.

Async-safe storage for request-scoped data. The request ID is set by
RequestIDMiddleware and read by the logging filter so every log line
emitted while handling a request carries it.

Usage:
    token = set_request_id("abc123")
    try:
        ...
    finally:
        reset_request_id(token)
"""

from contextvars import ContextVar, Token

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> Token:
    """Set the request ID for the current async task; returns a reset token."""
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    """Restore the request ID that was current before set_request_id."""
    _request_id.reset(token)


def get_request_id() -> str | None:
    """Return the current request ID, or None outside a request."""
    return _request_id.get()
