"""Application layer: DTOs, interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, mail, sockets).
"""

from app.application.services import (
    AuditLogger,
    NotificationEmitter,
    RecurringTaskGenerator,
)
from app.application.use_cases import GetDashboardStatsUseCase, TaskManager

__all__ = [
    "AuditLogger",
    "GetDashboardStatsUseCase",
    "NotificationEmitter",
    "RecurringTaskGenerator",
    "TaskManager",
]
