"""Generate instances for every recurring task (cron / scheduler entry point).

Usage:
    uv run python -m scripts.process_recurring_tasks
Runs in one transaction. Instances from earlier runs are not de-duplicated,
so schedule it no more often than the recurrence window calls for.
Live-socket pushes are skipped (no connections outside the API process);
email notifications use the configured mail backend.
"""

import asyncio
import sys
from pathlib import Path

import httpx
from dotenv import load_dotenv

import app.infrastructure.persistence.database as database
from app.application.services import (
    AuditLogger,
    NotificationEmitter,
    RecurringTaskGenerator,
)
from app.application.use_cases.tasks import TaskManager
from app.core.config import get_settings
from app.infrastructure.persistence.repositories import (
    AuditLogRepository,
    TaskRepository,
    UserRepository,
)
from app.infrastructure.services import EmailTemplateRenderer, build_mail_transport
from app.shared.telemetry.logging import setup_logging


def _load_env() -> None:
    """Load .env from the project root so get_settings() works from any working directory."""
    load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=True)


async def main() -> None:
    """Run one recurring-generation batch and print the summary."""
    _load_env()
    settings = get_settings()
    setup_logging()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)

    async with httpx.AsyncClient(timeout=settings.mail_timeout_seconds) as http_client:
        async with database.AsyncSessionLocal() as session:
            async with session.begin():
                task_repo = TaskRepository(session)
                user_repo = UserRepository(session)
                manager = TaskManager(
                    task_repo=task_repo,
                    user_repo=user_repo,
                    generator=RecurringTaskGenerator(
                        task_repo, window_days=settings.recurring_default_window_days
                    ),
                    audit_logger=AuditLogger(AuditLogRepository(session)),
                    notifier=NotificationEmitter(
                        user_repo,
                        mail_transport=build_mail_transport(settings, http_client),
                        renderer=EmailTemplateRenderer(
                            app_name=settings.app_name, app_url=settings.app_url
                        ),
                    ),
                )
                result = await manager.process_recurring_tasks()
    await database.dispose_engine()

    print(
        f"Processed {result.parents_processed} recurring tasks: "
        f"{result.instances_created} instances created, {result.error_count} errors"
    )
    if result.error_task_ids:
        print(f"Failed task ids: {result.error_task_ids}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    asyncio.run(main())
