"""Recurring task generator: materializes child instances of a recurring parent."""

from __future__ import annotations

from datetime import datetime

from app.application.dtos.task import CreateTaskInput, TaskResult
from app.application.interfaces.repositories import ITaskRepository
from app.domain.enums import RecurringPattern, TaskStatus
from app.domain.recurrence import (
    DEFAULT_WINDOW_DAYS,
    default_end_date,
    occurrence_dates,
)
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc

logger = get_logger(__name__)


class RecurringTaskGenerator:
    """Creates one child task per future occurrence of a recurring parent (IRecurringTaskGenerator).

    Occurrences start one period after the parent's due date and stop at the
    parent's recurring end date, or due date + window_days when unset. Children
    are plain tasks: not recurring, pattern NONE, status NOT_STARTED, linked to
    the parent through parent_task_id.

    Does not de-duplicate: calling it twice for the same parent creates the
    instances twice. Callers decide when a parent should generate.
    """

    def __init__(
        self,
        task_repo: ITaskRepository,
        window_days: int = DEFAULT_WINDOW_DAYS,
    ) -> None:
        self.task_repo = task_repo
        self.window_days = window_days

    def plan(self, parent: TaskResult) -> list[datetime]:
        """Return the due dates generate_instances would create, without writing."""
        if not parent.is_recurring or parent.recurring_pattern == RecurringPattern.NONE:
            return []
        if parent.parent_task_id is not None or parent.due_date is None:
            return []
        due_date = ensure_utc(parent.due_date)
        end_date = ensure_utc(parent.recurring_end_date) or default_end_date(
            due_date, self.window_days
        )
        return list(occurrence_dates(due_date, parent.recurring_pattern, end_date))

    def build_instances(self, parent: TaskResult) -> list[CreateTaskInput]:
        """Return the inputs for every child of the parent, in due-date order."""
        return [
            CreateTaskInput(
                title=parent.title,
                description=parent.description,
                priority=parent.priority,
                created_by_id=parent.created_by_id,
                assigned_to_id=parent.assigned_to_id,
                status=TaskStatus.NOT_STARTED,
                due_date=due_date,
                is_recurring=False,
                recurring_pattern=RecurringPattern.NONE,
                recurring_end_date=None,
                parent_task_id=parent.id,
            )
            for due_date in self.plan(parent)
        ]

    async def generate_instances(self, parent: TaskResult) -> list[TaskResult]:
        """Create the children of a recurring parent in one atomic batch.

        Args:
            parent: The recurring task (already persisted).

        Returns:
            Created children in due-date order; empty when the parent is not
            recurring, has no due date, or its end date precedes its due date.
        """
        items = self.build_instances(parent)
        if not items:
            logger.debug("Task %s: no recurring instances to generate", parent.id)
            return []

        children = await self.task_repo.create_many(items)
        logger.info(
            "Generated %d %s instances for task %s",
            len(children),
            parent.recurring_pattern.value,
            parent.id,
        )
        return children
