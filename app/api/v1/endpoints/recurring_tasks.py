"""Recurring task API: list recurring parents, their instances, and run the generation batch."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request

from app.api.v1.dependencies import (
    get_current_user,
    get_task_manager,
    get_task_manager_for_write,
    require_admin,
    require_admin_or_manager,
)
from app.application.dtos.user import UserResult
from app.application.use_cases.tasks import TaskManager
from app.core.limiter import limit_writes
from app.schemas.task import RecurringProcessResponse, TaskResponse

router = APIRouter()


@router.get("", response_model=list[TaskResponse])
async def list_recurring_tasks(
    _: Annotated[UserResult, Depends(require_admin_or_manager)],
    manager: Annotated[TaskManager, Depends(get_task_manager)],
):
    """Recurring parents (is_recurring with a pattern other than none)."""
    return [TaskResponse.model_validate(t) for t in await manager.list_recurring_tasks()]


@router.get("/{task_id}/instances", response_model=list[TaskResponse])
async def list_task_instances(
    task_id: int,
    _: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[TaskManager, Depends(get_task_manager)],
):
    """Instances generated from a recurring parent, soonest due first."""
    if await manager.get_task(task_id) is None:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    return [TaskResponse.model_validate(t) for t in await manager.list_instances(task_id)]


@router.post("/process", response_model=RecurringProcessResponse)
@limit_writes
async def process_recurring_tasks(
    request: Request,
    _: Annotated[UserResult, Depends(require_admin)],
    manager: Annotated[TaskManager, Depends(get_task_manager_for_write)],
):
    """Generate instances for every recurring parent (admin only).

    Instances generated by earlier runs are not de-duplicated.
    """
    result = await manager.process_recurring_tasks()
    return RecurringProcessResponse(
        parents_processed=result.parents_processed,
        instances_created=result.instances_created,
        error_count=result.error_count,
        error_task_ids=result.error_task_ids,
    )
