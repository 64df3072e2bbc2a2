"""Task repository (task store). Implements ITaskRepository; methods return TaskResult DTOs."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.task import CreateTaskInput, TaskFilters, TaskResult
from app.domain.enums import RecurringPattern, TaskPriority, TaskStatus
from app.domain.exceptions import TaskVersionConflictException
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc, utc_day_bounds

# Columns an update may touch; id, created_by_id and created_at are immutable.
PATCHABLE_COLUMNS = frozenset({
    "title",
    "description",
    "status",
    "priority",
    "due_date",
    "assigned_to_id",
    "is_recurring",
    "recurring_pattern",
    "recurring_end_date",
})


def _to_result(t: Task) -> TaskResult:
    """Map Task ORM to TaskResult DTO."""
    return TaskResult(
        id=t.id,
        title=t.title,
        description=t.description,
        status=TaskStatus(t.status),
        priority=TaskPriority(t.priority),
        due_date=ensure_utc(t.due_date),
        created_at=ensure_utc(t.created_at),
        created_by_id=t.created_by_id,
        assigned_to_id=t.assigned_to_id,
        is_recurring=t.is_recurring,
        recurring_pattern=RecurringPattern(t.recurring_pattern),
        recurring_end_date=ensure_utc(t.recurring_end_date),
        parent_task_id=t.parent_task_id,
        version=t.version,
        updated_at=ensure_utc(t.updated_at),
    )


def _column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return ensure_utc(value)
    return value


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


_RECURRING_PARENT = and_(
    Task.is_recurring.is_(True),
    Task.recurring_pattern != RecurringPattern.NONE.value,
)
_OPEN = Task.status != TaskStatus.COMPLETED.value


class TaskRepository(BaseRepository[Task]):
    """Task store: CRUD with optimistic versioning plus predicate queries."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def _results(self, stmt: Any) -> list[TaskResult]:
        return [_to_result(t) for t in await self._list(stmt)]

    @staticmethod
    def _new_row(data: CreateTaskInput) -> Task:
        return Task(
            title=data.title,
            description=data.description,
            status=_column_value(data.status or TaskStatus.NOT_STARTED),
            priority=_column_value(data.priority or TaskPriority.MEDIUM),
            due_date=ensure_utc(data.due_date),
            created_by_id=data.created_by_id,
            assigned_to_id=data.assigned_to_id,
            is_recurring=data.is_recurring,
            recurring_pattern=_column_value(data.recurring_pattern or RecurringPattern.NONE),
            recurring_end_date=ensure_utc(data.recurring_end_date),
            parent_task_id=data.parent_task_id,
        )

    async def create(self, data: CreateTaskInput) -> TaskResult:
        """Insert a task; status and priority default when absent."""
        return _to_result(await self._add(self._new_row(data)))

    async def create_many(self, items: Sequence[CreateTaskInput]) -> list[TaskResult]:
        """Insert tasks all-or-nothing inside a SAVEPOINT.

        A failed insert rolls back only this batch; the surrounding transaction
        stays usable.
        """
        if not items:
            return []
        rows = [self._new_row(data) for data in items]
        async with self.db.begin_nested():
            self.db.add_all(rows)
            await self.db.flush()
        for row in rows:
            await self.db.refresh(row)
        return [_to_result(row) for row in rows]

    async def get_by_id(self, task_id: int) -> TaskResult | None:
        task = await self.db.get(Task, task_id, populate_existing=True)
        return _to_result(task) if task else None

    async def update(
        self,
        task_id: int,
        values: dict[str, Any],
        expected_version: int | None = None,
    ) -> TaskResult | None:
        """Merge values into the task with a compare-and-swap on version.

        Keys outside PATCHABLE_COLUMNS are ignored. The version is bumped on
        every successful write.

        Raises:
            TaskVersionConflictException: expected_version given and stale.
        """
        row_values = {
            k: _column_value(v) for k, v in values.items() if k in PATCHABLE_COLUMNS
        }
        stmt = update(Task).where(Task.id == task_id)
        if expected_version is not None:
            stmt = stmt.where(Task.version == expected_version)
        stmt = stmt.values(**row_values, version=Task.version + 1).execution_options(
            synchronize_session=False
        )
        result = await self.db.execute(stmt)
        current = await self.db.get(Task, task_id, populate_existing=True)
        if result.rowcount == 0:
            if current is None:
                return None
            raise TaskVersionConflictException(task_id, expected_version, current.version)
        return _to_result(current) if current else None

    async def delete(self, task_id: int) -> bool:
        task = await self._get(task_id)
        if task is None:
            return False
        await self._remove(task)
        return True

    async def list_all(self, skip: int = 0, limit: int = 100) -> list[TaskResult]:
        return [
            _to_result(t)
            for t in await self._page(
                Task.created_at.desc(), Task.id.desc(), skip=skip, limit=limit
            )
        ]

    async def list_by_assignee(self, user_id: int) -> list[TaskResult]:
        return await self._results(
            select(Task)
            .where(Task.assigned_to_id == user_id)
            .order_by(Task.due_date.asc().nulls_last(), Task.id)
        )

    async def list_by_creator(self, user_id: int) -> list[TaskResult]:
        return await self._results(
            select(Task)
            .where(Task.created_by_id == user_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
        )

    async def list_overdue(self, user_id: int, now: datetime) -> list[TaskResult]:
        """Open tasks due before now where the user is assignee or creator."""
        return await self._results(
            select(Task)
            .where(
                Task.due_date.is_not(None),
                Task.due_date < ensure_utc(now),
                _OPEN,
                or_(Task.assigned_to_id == user_id, Task.created_by_id == user_id),
            )
            .order_by(Task.due_date.asc(), Task.id)
        )

    async def list_recurring(self) -> list[TaskResult]:
        return await self._results(
            select(Task).where(_RECURRING_PARENT).order_by(Task.id)
        )

    async def list_children(self, parent_task_id: int) -> list[TaskResult]:
        return await self._results(
            select(Task)
            .where(Task.parent_task_id == parent_task_id)
            .order_by(Task.due_date.asc(), Task.id)
        )

    async def search(
        self, query: str, filters: TaskFilters | None = None
    ) -> list[TaskResult]:
        """Case-insensitive substring match on title/description, AND-ed with filters.

        An empty query applies only the filters.
        """
        conditions = []
        if query:
            pattern = _like_pattern(query)
            conditions.append(
                or_(
                    Task.title.ilike(pattern, escape="\\"),
                    Task.description.ilike(pattern, escape="\\"),
                )
            )
        if filters is not None:
            if filters.status:
                conditions.append(Task.status.in_([s.value for s in filters.status]))
            if filters.priority:
                conditions.append(Task.priority.in_([p.value for p in filters.priority]))
            if filters.due_date is not None:
                start, end = utc_day_bounds(filters.due_date)
                conditions.append(and_(Task.due_date >= start, Task.due_date < end))
            if filters.assigned_to_id is not None:
                conditions.append(Task.assigned_to_id == filters.assigned_to_id)
            if filters.created_by_id is not None:
                conditions.append(Task.created_by_id == filters.created_by_id)
        return await self._results(
            select(Task)
            .where(and_(*conditions))
            .order_by(Task.created_at.desc(), Task.id.desc())
        )

    async def count_all(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Task))
        return result.scalar_one()

    async def count_involving(self, user_id: int) -> int:
        """Tasks the user created or is assigned to."""
        result = await self.db.execute(
            select(func.count())
            .select_from(Task)
            .where(or_(Task.created_by_id == user_id, Task.assigned_to_id == user_id))
        )
        return result.scalar_one()

    async def _counts_by(self, column: Any) -> dict[str, int]:
        result = await self.db.execute(
            select(column, func.count()).group_by(column)
        )
        return {key: count for key, count in result.all()}

    async def get_counts_by_status(self) -> dict[str, int]:
        return await self._counts_by(Task.status)

    async def get_counts_by_priority(self) -> dict[str, int]:
        return await self._counts_by(Task.priority)

    async def count_overdue(self, now: datetime) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Task)
            .where(Task.due_date.is_not(None), Task.due_date < ensure_utc(now), _OPEN)
        )
        return result.scalar_one()

    async def count_recurring(self) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Task).where(_RECURRING_PARENT)
        )
        return result.scalar_one()

    async def get_assignee_counts(self) -> list[tuple[int, int, int]]:
        completed = func.sum(
            case((Task.status == TaskStatus.COMPLETED.value, 1), else_=0)
        )
        result = await self.db.execute(
            select(Task.assigned_to_id, func.count(), completed)
            .where(Task.assigned_to_id.is_not(None))
            .group_by(Task.assigned_to_id)
            .order_by(Task.assigned_to_id)
        )
        return [(uid, total, int(done or 0)) for uid, total, done in result.all()]
