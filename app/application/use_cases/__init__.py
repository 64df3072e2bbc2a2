"""Application use cases: one entry point per workflow."""

from app.application.use_cases.analytics import GetDashboardStatsUseCase
from app.application.use_cases.tasks import TaskManager
from app.application.use_cases.users import UserManager

__all__ = [
    "GetDashboardStatsUseCase",
    "TaskManager",
    "UserManager",
]
