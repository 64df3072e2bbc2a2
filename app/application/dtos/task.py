"""DTOs for task use cases (no dependency on ORM or presentation schemas)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

from app.domain.enums import RecurringPattern, TaskPriority, TaskStatus

# Marks a patch field the caller did not send (distinct from an explicit None).
UNSET: Any = object()


@dataclass(frozen=True)
class CreateTaskInput:
    """Input for creating a task. created_by_id is the acting user."""

    title: str
    created_by_id: int
    description: str | None = None
    status: TaskStatus = TaskStatus.NOT_STARTED
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    assigned_to_id: int | None = None
    is_recurring: bool = False
    recurring_pattern: RecurringPattern = RecurringPattern.NONE
    recurring_end_date: datetime | None = None
    parent_task_id: int | None = None


@dataclass(frozen=True)
class UpdateTaskPatch:
    """Partial update for a task. Fields left as UNSET are not touched.

    id, created_by_id and created_at are not patchable. expected_version,
    when given, must match the stored version or the update is rejected.
    """

    title: Any = UNSET
    description: Any = UNSET
    status: Any = UNSET
    priority: Any = UNSET
    due_date: Any = UNSET
    assigned_to_id: Any = UNSET
    is_recurring: Any = UNSET
    recurring_pattern: Any = UNSET
    recurring_end_date: Any = UNSET
    expected_version: int | None = None

    def provided(self) -> dict[str, Any]:
        """Return the fields the caller set, excluding expected_version."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "expected_version" and getattr(self, f.name) is not UNSET
        }

    @classmethod
    def from_dict(cls, values: dict[str, Any], expected_version: int | None = None) -> UpdateTaskPatch:
        """Build a patch from a dict of provided fields; unknown keys are ignored."""
        names = {f.name for f in fields(cls)} - {"expected_version"}
        return cls(
            **{k: v for k, v in values.items() if k in names},
            expected_version=expected_version,
        )


@dataclass(frozen=True)
class TaskResult:
    """Task read-model (result of create, get_by_id, update, list queries)."""

    id: int
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None
    created_at: datetime
    created_by_id: int
    assigned_to_id: int | None
    is_recurring: bool
    recurring_pattern: RecurringPattern
    recurring_end_date: datetime | None
    parent_task_id: int | None
    version: int = 1
    updated_at: datetime | None = None

    @property
    def generates_instances(self) -> bool:
        """True when the task is a recurring parent with a real pattern."""
        return self.is_recurring and self.recurring_pattern != RecurringPattern.NONE


@dataclass(frozen=True)
class TaskFilters:
    """AND-ed filters for task search. None means no constraint."""

    status: tuple[TaskStatus, ...] | None = None
    priority: tuple[TaskPriority, ...] | None = None
    due_date: datetime | None = None
    assigned_to_id: int | None = None
    created_by_id: int | None = None


@dataclass
class RecurringProcessResult:
    """Summary of a process_recurring_tasks batch run."""

    parents_processed: int = 0
    instances_created: int = 0
    error_count: int = 0
    error_task_ids: list[int] = field(default_factory=list)
