"""Application services: recurring generation, audit logging, notifications."""

from app.application.services.audit_logger import AuditLogger
from app.application.services.notification_emitter import (
    MESSAGE_TEMPLATES,
    NotificationEmitter,
    NotificationOutbox,
    build_message,
    email_enabled_for,
)
from app.application.services.recurring_task_generator import RecurringTaskGenerator

__all__ = [
    "MESSAGE_TEMPLATES",
    "AuditLogger",
    "NotificationEmitter",
    "NotificationOutbox",
    "RecurringTaskGenerator",
    "build_message",
    "email_enabled_for",
]
