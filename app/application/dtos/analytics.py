"""DTOs for analytics/dashboard (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.application.dtos.audit_log import AuditLogResult


@dataclass(frozen=True)
class AssigneeCompletion:
    """Completion figures for one assignee."""

    user_id: int
    name: str
    assigned: int
    completed: int

    @property
    def completion_rate(self) -> float:
        """Completed / assigned as a percentage, 0.0 when nothing is assigned."""
        if not self.assigned:
            return 0.0
        return round(self.completed * 100 / self.assigned, 1)


@dataclass
class DashboardStats:
    """Dashboard stats: counts by status and priority, overdue, recurring, recent activity."""

    total_tasks: int
    tasks_by_status: dict[str, int]
    tasks_by_priority: dict[str, int]
    overdue_tasks: int
    recurring_tasks: int
    completion_rate: float
    assignees: list[AssigneeCompletion] = field(default_factory=list)
    recent_activity: list["AuditLogResult"] = field(default_factory=list)
