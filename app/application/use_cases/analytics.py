"""Analytics use case: dashboard stats (counts, completion rates, recent activity)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.application.dtos.analytics import AssigneeCompletion, DashboardStats
from app.domain.enums import TaskPriority, TaskStatus
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        IAuditLogRepository,
        ITaskRepository,
        IUserRepository,
    )

RECENT_ACTIVITY_LIMIT = 10


class GetDashboardStatsUseCase:
    """Get aggregate task stats and recent audit activity for the admin dashboard."""

    def __init__(
        self,
        task_repo: "ITaskRepository",
        user_repo: "IUserRepository",
        audit_repo: "IAuditLogRepository",
    ) -> None:
        self.task_repo = task_repo
        self.user_repo = user_repo
        self.audit_repo = audit_repo

    async def get_dashboard_stats(self) -> DashboardStats:
        """Return counts by status and priority, overdue and recurring totals,
        per-assignee completion, and the most recent audit entries."""
        total_tasks = await self.task_repo.count_all()
        by_status = await self.task_repo.get_counts_by_status()
        by_priority = await self.task_repo.get_counts_by_priority()
        overdue = await self.task_repo.count_overdue(utc_now())
        recurring = await self.task_repo.count_recurring()

        names = {u.id: u.name or u.username for u in await self.user_repo.list_all()}
        assignees = [
            AssigneeCompletion(
                user_id=user_id,
                name=names.get(user_id, f"User {user_id}"),
                assigned=assigned,
                completed=completed,
            )
            for user_id, assigned, completed in await self.task_repo.get_assignee_counts()
        ]
        assignees.sort(key=lambda a: (-a.completion_rate, a.name))

        completed = by_status.get(TaskStatus.COMPLETED.value, 0)
        completion_rate = round(completed * 100 / total_tasks, 1) if total_tasks else 0.0
        recent = await self.audit_repo.list_entries(skip=0, limit=RECENT_ACTIVITY_LIMIT)
        return DashboardStats(
            total_tasks=total_tasks,
            tasks_by_status={s: by_status.get(s, 0) for s in TaskStatus.values()},
            tasks_by_priority={p: by_priority.get(p, 0) for p in TaskPriority.values()},
            overdue_tasks=overdue,
            recurring_tasks=recurring,
            completion_rate=completion_rate,
            assignees=assignees,
            recent_activity=recent,
        )
