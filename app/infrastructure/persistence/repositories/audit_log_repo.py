"""Audit log repository. Append-only; implements IAuditLogRepository."""

from __future__ import annotations

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
from app.domain.exceptions import AuditWriteException
from app.infrastructure.persistence.models.audit_log import AuditLog
from app.shared.enums import AuditAction, AuditEntityType
from app.shared.utils.datetime import ensure_utc


def _orm_to_result(row: AuditLog) -> AuditLogResult:
    """Map ORM to application DTO."""
    return AuditLogResult(
        id=row.id,
        entity_type=AuditEntityType(row.entity_type),
        entity_id=row.entity_id,
        action=AuditAction(row.action),
        user_id=row.user_id,
        details=dict(row.details or {}),
        timestamp=ensure_utc(row.timestamp),
    )


class AuditLogRepository:
    """Append-only audit log repository. No update/delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit log entry; return created record.

        Runs in a SAVEPOINT so a failed insert leaves the surrounding
        transaction (the task mutation) usable.

        Raises:
            AuditWriteException: The insert failed.
        """
        row = AuditLog(
            entity_type=entry.entity_type.value,
            entity_id=entry.entity_id,
            action=entry.action.value,
            user_id=entry.user_id,
            details=entry.details,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(row)
                await self.db.flush()
        except SQLAlchemyError as e:
            raise AuditWriteException(
                entry.entity_type.value, entry.entity_id, entry.action.value
            ) from e
        return _orm_to_result(row)

    async def list_entries(
        self,
        entity_type: AuditEntityType | None = None,
        entity_id: int | None = None,
        user_id: int | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLogResult]:
        """List audit log entries with optional filters (newest first, ties by id)."""
        conditions = []
        if entity_type is not None:
            conditions.append(AuditLog.entity_type == entity_type.value)
        if entity_id is not None:
            conditions.append(AuditLog.entity_id == entity_id)
        if user_id is not None:
            conditions.append(AuditLog.user_id == user_id)

        stmt = (
            select(AuditLog)
            .where(and_(*conditions))
            .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [_orm_to_result(r) for r in result.scalars().all()]
