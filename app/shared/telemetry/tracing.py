"""Tracing helpers: the ``traced`` decorator and current-span utilities.

Side-effect failures that are deliberately swallowed (audit writes,
notification delivery) are recorded with ``add_span_event`` so they stay
observable without failing the request.
"""

import asyncio
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

T = TypeVar("T")

# Only these kwarg names are copied onto spans; anything else may carry user data.
_SAFE_SPAN_ATTR_KEYS = frozenset({
    "task_id", "user_id", "acting_user_id", "assignee_id", "parent_task_id",
    "entity_type", "entity_id", "action", "status", "pattern",
    "skip", "limit", "expected_version",
})


def _set_safe_span_attrs(span: trace.Span, kwargs: dict) -> None:
    """Set span attributes from kwargs; only allowlisted keys are recorded."""
    for key, value in kwargs.items():
        if key.lower() in _SAFE_SPAN_ATTR_KEYS and value is not None:
            span.set_attribute(f"arg.{key}", str(value))


def _mark(span: trace.Span, error: Exception | None) -> None:
    if error is None:
        span.set_status(Status(StatusCode.OK))
    else:
        span.set_status(Status(StatusCode.ERROR, str(error)))
        span.record_exception(error)


def traced(
    operation_name: str | None = None,
    attributes: dict | None = None,
) -> Callable:
    """Decorator to create a span for a function (sync or async).

    Args:
        operation_name: Span name (defaults to module.funcname).
        attributes: Optional dict of static attributes to set on the span.

    Returns:
        Decorated function.
    """

    def decorator(func: Callable) -> Callable:
        tracer = trace.get_tracer(__name__)
        span_name = operation_name or f"{func.__module__}.{func.__name__}"

        def _start(span: trace.Span, kwargs: dict) -> None:
            for key, value in (attributes or {}).items():
                span.set_attribute(key, value)
            _set_safe_span_attrs(span, kwargs)

        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(span_name) as span:
                _start(span, kwargs)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _mark(span, e)
                    raise
                _mark(span, None)
                return result

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(span_name) as span:
                _start(span, kwargs)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _mark(span, e)
                    raise
                _mark(span, None)
                return result

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Add attributes to the current span."""
    span = trace.get_current_span()
    if span and span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


def add_span_event(name: str, attributes: dict | None = None) -> None:
    """Add an event to the current span."""
    span = trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name, attributes=attributes or {})


def set_span_error(exception: Exception) -> None:
    """Mark the current span as error and record the exception."""
    span = trace.get_current_span()
    if span and span.is_recording():
        span.set_status(Status(StatusCode.ERROR, str(exception)))
        span.record_exception(exception)


def get_trace_id() -> str | None:
    """Return the current trace ID as 32-char hex, or None."""
    span = trace.get_current_span()
    if span:
        ctx = span.get_span_context()
        if ctx.is_valid:
            return format(ctx.trace_id, "032x")
    return None
