"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, repositories, the current user
and application services. Routes depend only on these, never on
infrastructure constructors directly.

Read routes use get_db (no commit); write routes use get_db_transactional so
the task row, its generated instances and its audit entries commit together.
Notifications raised by a write are queued in a NotificationOutbox and sent
only once that transaction has committed.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.user import UserResult
from app.application.services import (
    AuditLogger,
    NotificationEmitter,
    NotificationOutbox,
    RecurringTaskGenerator,
)
from app.application.use_cases.analytics import GetDashboardStatsUseCase
from app.application.use_cases.tasks import TaskManager
from app.application.use_cases.users import UserManager
from app.core.config import get_settings
from app.domain.enums import UserRole
from app.infrastructure.persistence.database import (
    get_db,
    get_db_transactional,
    session_scope,
)
from app.infrastructure.persistence.repositories import (
    AuditLogRepository,
    TaskRepository,
    UserRepository,
)
from app.infrastructure.security.jwt import user_id_from_token
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_http_bearer = HTTPBearer(auto_error=False)


async def get_user_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRepository:
    """User repository for read operations (login, directory)."""
    return UserRepository(db)


async def get_user_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> UserRepository:
    """User repository for registration and preference updates (transactional)."""
    return UserRepository(db)


async def get_audit_log_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuditLogRepository:
    """Audit log repository for read (list). Writes go through the task manager."""
    return AuditLogRepository(db)


async def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> UserResult | None:
    """Return current user from JWT if present and active; else None.

    The lookup runs on its own short-lived session so write routes can hold a
    single transactional session for the rest of the request.
    """
    if not credentials:
        return None
    try:
        user_id = user_id_from_token(credentials.credentials)
    except ValueError:
        return None
    async with session_scope() as db:
        user = await UserRepository(db).get_by_id(user_id)
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(
    current_user: Annotated[UserResult | None, Depends(get_current_user_optional)],
) -> UserResult:
    """Return current user from JWT; raise 401 if missing or invalid."""
    if current_user is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user


def require_role(*roles: UserRole):
    """Dependency factory: require JWT auth and one of the given roles."""

    async def _require(
        current_user: Annotated[UserResult, Depends(get_current_user)],
    ) -> UserResult:
        if current_user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return current_user

    return _require


require_admin = require_role(UserRole.ADMIN)
require_admin_or_manager = require_role(UserRole.ADMIN, UserRole.MANAGER)


def _build_task_manager(
    request: Request, db: AsyncSession, outbox: NotificationOutbox | None = None
) -> TaskManager:
    """Wire a TaskManager on one session; live and mail collaborators come from app.state."""
    settings = get_settings()
    task_repo = TaskRepository(db)
    user_repo = UserRepository(db)
    state = request.app.state
    notifier = NotificationEmitter(
        user_repo,
        connections=getattr(state, "ws_manager", None),
        mail_transport=getattr(state, "mail_transport", None),
        renderer=getattr(state, "email_renderer", None),
        outbox=outbox,
    )
    return TaskManager(
        task_repo=task_repo,
        user_repo=user_repo,
        generator=RecurringTaskGenerator(
            task_repo, window_days=settings.recurring_default_window_days
        ),
        audit_logger=AuditLogger(AuditLogRepository(db)),
        notifier=notifier,
    )


async def get_task_manager(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TaskManager:
    """Task manager for read routes."""
    return _build_task_manager(request, db)


async def get_notification_outbox() -> AsyncIterator[NotificationOutbox]:
    """Outbox flushed after the request's write transaction commits.

    Write dependencies list it before get_db_transactional, so it is set up
    first and torn down last: its flush runs after the commit. A failed
    request or commit raises out of the yield and nothing is sent.
    """
    outbox = NotificationOutbox()
    yield outbox
    sent = await outbox.flush()
    if sent:
        logger.debug("Delivered %d notifications after commit", sent)


async def get_task_manager_for_write(
    request: Request,
    outbox: Annotated[NotificationOutbox, Depends(get_notification_outbox)],
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> TaskManager:
    """Task manager for create/update/delete and recurring processing (one transaction)."""
    return _build_task_manager(request, db, outbox)


async def get_user_manager_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> UserManager:
    """User manager for account and profile changes; audit entries share the transaction."""
    return UserManager(
        user_repo=UserRepository(db),
        task_repo=TaskRepository(db),
        audit_logger=AuditLogger(AuditLogRepository(db)),
    )


async def get_dashboard_stats_use_case(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> GetDashboardStatsUseCase:
    """Dashboard stats use case (composition root)."""
    return GetDashboardStatsUseCase(
        task_repo=TaskRepository(db),
        user_repo=UserRepository(db),
        audit_repo=AuditLogRepository(db),
    )
