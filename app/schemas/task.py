"""Task API schemas."""

from datetime import datetime

from pydantic import Field

from app.domain.enums import RecurringPattern, TaskPriority, TaskStatus
from app.schemas.base import CamelModel


class TaskCreateRequest(CamelModel):
    """Request body for POST /tasks. The creator is the authenticated user.

    Title emptiness and user references are checked by the task manager (400).
    """

    title: str = Field(..., max_length=255)
    description: str | None = None
    status: TaskStatus = TaskStatus.NOT_STARTED
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    assigned_to_id: int | None = None
    is_recurring: bool = False
    recurring_pattern: RecurringPattern = RecurringPattern.NONE
    recurring_end_date: datetime | None = None


class TaskUpdateRequest(CamelModel):
    """Request body for PATCH /tasks/{id}. Only the keys sent are applied.

    Unknown and immutable keys (id, createdById, createdAt) are ignored.
    """

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    assigned_to_id: int | None = None
    is_recurring: bool | None = None
    recurring_pattern: RecurringPattern | None = None
    recurring_end_date: datetime | None = None
    expected_version: int | None = Field(
        default=None,
        ge=1,
        description="Reject the update with 409 unless the stored version matches",
    )


class TaskResponse(CamelModel):
    """Task as returned by the API."""

    id: int
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None
    created_by_id: int
    assigned_to_id: int | None = None
    is_recurring: bool
    recurring_pattern: RecurringPattern
    recurring_end_date: datetime | None = None
    parent_task_id: int | None = None
    version: int


class RecurringProcessResponse(CamelModel):
    """Summary of POST /recurring-tasks/process."""

    parents_processed: int
    instances_created: int
    error_count: int
    error_task_ids: list[int] = Field(default_factory=list)
