"""Shared utilities: request context, enums, telemetry, and UTC helpers.

Used by application and infrastructure. No business logic.
"""

from app.shared.context import get_request_id, reset_request_id, set_request_id
from app.shared.enums import (
    AuditAction,
    AuditEntityType,
    NotificationChannel,
    NotificationType,
)
from app.shared.utils import ensure_utc, utc_day_bounds, utc_now

__all__ = [
    "get_request_id",
    "set_request_id",
    "reset_request_id",
    "AuditAction",
    "AuditEntityType",
    "NotificationChannel",
    "NotificationType",
    "utc_now",
    "ensure_utc",
    "utc_day_bounds",
]
