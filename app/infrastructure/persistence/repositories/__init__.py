"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.audit_log_repo import (
    AuditLogRepository,
)
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.task_repo import TaskRepository
from app.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "AuditLogRepository",
    "BaseRepository",
    "TaskRepository",
    "UserRepository",
]
