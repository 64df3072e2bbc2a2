"""Analytics/dashboard API schemas."""

from pydantic import Field

from app.schemas.audit_log import AuditLogEntryResponse
from app.schemas.base import CamelModel


class AssigneeCompletionItem(CamelModel):
    """Per-assignee completion figures."""

    user_id: int
    name: str
    assigned: int
    completed: int
    completion_rate: float


class DashboardStatsResponse(CamelModel):
    """Dashboard stats: task counts, overdue and recurring totals, recent audit activity."""

    total_tasks: int
    tasks_by_status: dict[str, int] = Field(default_factory=dict)
    tasks_by_priority: dict[str, int] = Field(default_factory=dict)
    overdue_tasks: int
    recurring_tasks: int
    completion_rate: float
    assignees: list[AssigneeCompletionItem] = Field(default_factory=list)
    recent_activity: list[AuditLogEntryResponse] = Field(default_factory=list)
