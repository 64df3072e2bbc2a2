"""Request/response schemas for audit log API."""

from datetime import datetime
from typing import Any

from app.schemas.base import CamelModel
from app.shared.enums import AuditAction, AuditEntityType


class AuditLogEntryResponse(CamelModel):
    """Single audit log entry (read). details keys are already camelCase."""

    id: int
    entity_type: AuditEntityType
    entity_id: int
    action: AuditAction
    user_id: int
    details: dict[str, Any]
    timestamp: datetime
