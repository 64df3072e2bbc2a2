"""Task API: thin routes delegating to TaskManager.

Any authenticated user may read tasks. Only the creator, the assignee, or an
admin/manager may modify or delete one (403 otherwise).
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from app.api.v1.dependencies import (
    get_current_user,
    get_task_manager,
    get_task_manager_for_write,
)
from app.application.dtos.task import (
    CreateTaskInput,
    TaskFilters,
    TaskResult,
    UpdateTaskPatch,
)
from app.application.dtos.user import UserResult
from app.application.use_cases.tasks import TaskManager
from app.core.limiter import limit_writes
from app.domain.enums import TaskPriority, TaskStatus
from app.domain.exceptions import AuthorizationException
from app.schemas.audit_log import AuditLogEntryResponse
from app.schemas.task import TaskCreateRequest, TaskResponse, TaskUpdateRequest

router = APIRouter()


def _can_modify(task: TaskResult, user: UserResult) -> bool:
    return user.is_privileged or user.id in (task.created_by_id, task.assigned_to_id)


def _ensure_can_modify(task: TaskResult, user: UserResult, action: str) -> None:
    if not _can_modify(task, user):
        raise AuthorizationException(resource="task", action=action)


def _task_not_found(task_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Task not found: {task_id}")


def _to_response(tasks: list[TaskResult]) -> list[TaskResponse]:
    return [TaskResponse.model_validate(t) for t in tasks]


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    _: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[TaskManager, Depends(get_task_manager)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """List tasks, newest first (paginated)."""
    return _to_response(await manager.list_tasks(skip=skip, limit=limit))


@router.post("", response_model=TaskResponse, status_code=201)
@limit_writes
async def create_task(
    request: Request,
    body: TaskCreateRequest,
    current_user: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[TaskManager, Depends(get_task_manager_for_write)],
):
    """Create a task owned by the caller. Recurring tasks generate their instances now."""
    task = await manager.create_task(
        CreateTaskInput(
            title=body.title,
            created_by_id=current_user.id,
            description=body.description,
            status=body.status,
            priority=body.priority,
            due_date=body.due_date,
            assigned_to_id=body.assigned_to_id,
            is_recurring=body.is_recurring,
            recurring_pattern=body.recurring_pattern,
            recurring_end_date=body.recurring_end_date,
        ),
        acting_user_id=current_user.id,
    )
    return TaskResponse.model_validate(task)


@router.get("/assigned/me", response_model=list[TaskResponse])
async def list_assigned_to_me(
    current_user: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[TaskManager, Depends(get_task_manager)],
):
    """Tasks assigned to the caller, soonest due first."""
    return _to_response(await manager.list_assigned_to(current_user.id))


@router.get("/created/me", response_model=list[TaskResponse])
async def list_created_by_me(
    current_user: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[TaskManager, Depends(get_task_manager)],
):
    """Tasks the caller created, newest first."""
    return _to_response(await manager.list_created_by(current_user.id))


@router.get("/overdue", response_model=list[TaskResponse])
async def list_overdue(
    current_user: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[TaskManager, Depends(get_task_manager)],
):
    """Open tasks past due where the caller is assignee or creator."""
    return _to_response(await manager.list_overdue(current_user.id))


@router.get("/search", response_model=list[TaskResponse])
async def search_tasks(
    _: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[TaskManager, Depends(get_task_manager)],
    q: str = Query("", max_length=200, description="Substring of title or description"),
    status: list[TaskStatus] | None = Query(None),
    priority: list[TaskPriority] | None = Query(None),
    due_date: datetime | None = Query(None, alias="dueDate"),
    assigned_to_id: int | None = Query(None, alias="assignedToId"),
    created_by_id: int | None = Query(None, alias="createdById"),
):
    """Case-insensitive text search AND-ed with the given filters."""
    filters = TaskFilters(
        status=tuple(status) if status else None,
        priority=tuple(priority) if priority else None,
        due_date=due_date,
        assigned_to_id=assigned_to_id,
        created_by_id=created_by_id,
    )
    return _to_response(await manager.search_tasks(q, filters))


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    _: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[TaskManager, Depends(get_task_manager)],
):
    """Get a task by id."""
    task = await manager.get_task(task_id)
    if task is None:
        raise _task_not_found(task_id)
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}", response_model=TaskResponse)
@limit_writes
async def update_task(
    request: Request,
    task_id: int,
    body: TaskUpdateRequest,
    current_user: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[TaskManager, Depends(get_task_manager_for_write)],
):
    """Apply the fields sent; 409 when expectedVersion is stale."""
    task = await manager.get_task(task_id)
    if task is None:
        raise _task_not_found(task_id)
    _ensure_can_modify(task, current_user, "update")

    patch = UpdateTaskPatch.from_dict(
        body.model_dump(exclude_unset=True, exclude={"expected_version"}),
        expected_version=body.expected_version,
    )
    updated = await manager.update_task(task_id, patch, acting_user_id=current_user.id)
    if updated is None:
        raise _task_not_found(task_id)
    return TaskResponse.model_validate(updated)


@router.delete("/{task_id}", status_code=204)
@limit_writes
async def delete_task(
    request: Request,
    task_id: int,
    current_user: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[TaskManager, Depends(get_task_manager_for_write)],
):
    """Hard-delete a task. Its audit history is kept."""
    task = await manager.get_task(task_id)
    if task is None:
        raise _task_not_found(task_id)
    _ensure_can_modify(task, current_user, "delete")
    if not await manager.delete_task(task_id, acting_user_id=current_user.id):
        raise _task_not_found(task_id)
    return Response(status_code=204)


@router.get("/{task_id}/audit-logs", response_model=list[AuditLogEntryResponse])
async def get_task_audit_logs(
    task_id: int,
    current_user: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[TaskManager, Depends(get_task_manager)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """Audit history of one task, newest first (same access rule as modifying it)."""
    task = await manager.get_task(task_id)
    if task is None:
        raise _task_not_found(task_id)
    _ensure_can_modify(task, current_user, "read_audit")
    entries = await manager.get_task_audit_logs(task_id, skip=skip, limit=limit)
    return [AuditLogEntryResponse.model_validate(e) for e in entries]
