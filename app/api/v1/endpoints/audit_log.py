"""Audit log API: who did what to which task, and when."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import (
    get_audit_log_repo,
    get_current_user,
    require_admin,
)
from app.application.dtos.user import UserResult
from app.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from app.schemas.audit_log import AuditLogEntryResponse
from app.shared.enums import AuditEntityType

router = APIRouter()


@router.get("", response_model=list[AuditLogEntryResponse])
async def list_audit_log(
    _: Annotated[UserResult, Depends(require_admin)],
    audit_repo: Annotated[AuditLogRepository, Depends(get_audit_log_repo)],
    entity_type: AuditEntityType | None = Query(None, alias="entityType"),
    entity_id: int | None = Query(None, alias="entityId"),
    user_id: int | None = Query(None, alias="userId"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """List audit entries (admin only), newest first, with optional filters."""
    entries = await audit_repo.list_entries(
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        skip=skip,
        limit=limit,
    )
    return [AuditLogEntryResponse.model_validate(e) for e in entries]


@router.get("/me", response_model=list[AuditLogEntryResponse])
async def list_my_audit_log(
    current_user: Annotated[UserResult, Depends(get_current_user)],
    audit_repo: Annotated[AuditLogRepository, Depends(get_audit_log_repo)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """Entries for actions the caller performed."""
    entries = await audit_repo.list_entries(
        user_id=current_user.id, skip=skip, limit=limit
    )
    return [AuditLogEntryResponse.model_validate(e) for e in entries]
