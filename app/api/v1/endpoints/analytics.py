"""Analytics API: dashboard stats (admin/manager)."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import (
    get_dashboard_stats_use_case,
    require_admin_or_manager,
)
from app.application.dtos.user import UserResult
from app.application.use_cases.analytics import GetDashboardStatsUseCase
from app.schemas.analytics import AssigneeCompletionItem, DashboardStatsResponse
from app.schemas.audit_log import AuditLogEntryResponse

router = APIRouter()


@router.get("/dashboard", response_model=DashboardStatsResponse)
async def get_dashboard(
    _: Annotated[UserResult, Depends(require_admin_or_manager)],
    use_case: Annotated[
        GetDashboardStatsUseCase, Depends(get_dashboard_stats_use_case)
    ],
):
    """Return task counts, completion rates and the last 10 audit entries."""
    stats = await use_case.get_dashboard_stats()
    return DashboardStatsResponse(
        total_tasks=stats.total_tasks,
        tasks_by_status=stats.tasks_by_status,
        tasks_by_priority=stats.tasks_by_priority,
        overdue_tasks=stats.overdue_tasks,
        recurring_tasks=stats.recurring_tasks,
        completion_rate=stats.completion_rate,
        assignees=[
            AssigneeCompletionItem(
                user_id=a.user_id,
                name=a.name,
                assigned=a.assigned,
                completed=a.completed,
                completion_rate=a.completion_rate,
            )
            for a in stats.assignees
        ],
        recent_activity=[
            AuditLogEntryResponse.model_validate(e) for e in stats.recent_activity
        ],
    )
