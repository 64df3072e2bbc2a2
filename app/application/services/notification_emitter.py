"""Notification emitter: fans a task event out to one user over live push and email."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import partial
from typing import TYPE_CHECKING

from app.application.dtos.notification import (
    NotificationDispatchResult,
    TaskNotification,
)
from app.application.dtos.task import TaskResult
from app.application.dtos.user import UserResult
from app.application.interfaces.repositories import IUserRepository
from app.shared.enums import NotificationChannel, NotificationType
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_event
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.interfaces.services import (
        IConnectionRegistry,
        IEmailTemplateRenderer,
        IMailTransport,
    )

logger = get_logger(__name__)

MESSAGE_TEMPLATES: dict[NotificationType, str] = {
    NotificationType.ASSIGNED: "{actor} assigned you a new task: {title}",
    NotificationType.UPDATED: "{actor} updated a task assigned to you: {title}",
    NotificationType.COMPLETED: "{actor} marked a task as completed: {title}",
}

def build_message(kind: NotificationType, actor: str, title: str) -> str:
    """Render the one-line message for a notification type."""
    return MESSAGE_TEMPLATES[kind].format(actor=actor, title=title)


def email_enabled_for(user: UserResult, kind: NotificationType) -> bool:
    """True if the user wants email for this event type and has an address."""
    prefs = user.notification_preferences
    if not prefs.email or not user.email:
        return False
    if kind == NotificationType.ASSIGNED:
        return prefs.task_assignment
    if kind == NotificationType.UPDATED:
        return prefs.task_status_update
    return prefs.task_completion or prefs.task_status_update


class NotificationOutbox:
    """Deliveries held back until the surrounding transaction has committed.

    The write dependency flushes it after commit; a request that fails or
    rolls back never flushes, so nobody hears about a change that was undone.
    """

    def __init__(self) -> None:
        self._pending: list[Callable[[], Awaitable[None]]] = []

    def __len__(self) -> int:
        return len(self._pending)

    def add(self, delivery: Callable[[], Awaitable[None]]) -> None:
        self._pending.append(delivery)

    async def flush(self) -> int:
        """Run and forget every queued delivery. Returns how many ran."""
        pending, self._pending = self._pending, []
        for delivery in pending:
            await delivery()
        return len(pending)


class NotificationEmitter:
    """Delivers task notifications over the live socket and email (INotificationEmitter).

    Channels are independent: a push failure does not stop the email and vice
    versa. No failure, including a failed recipient lookup, is raised to the
    caller: each is logged and recorded as a span event.

    With an outbox, the recipient is resolved immediately but delivery waits
    for NotificationOutbox.flush().
    """

    def __init__(
        self,
        user_repo: IUserRepository,
        connections: "IConnectionRegistry | None" = None,
        mail_transport: "IMailTransport | None" = None,
        renderer: "IEmailTemplateRenderer | None" = None,
        outbox: NotificationOutbox | None = None,
    ) -> None:
        self.user_repo = user_repo
        self.connections = connections
        self.mail_transport = mail_transport
        self.renderer = renderer
        self.outbox = outbox

    async def notify_assigned(
        self, task: TaskResult, assignee_id: int, assigner_name: str
    ) -> NotificationDispatchResult:
        return await self._dispatch(
            NotificationType.ASSIGNED, task, assignee_id, assigner_name
        )

    async def notify_updated(
        self, task: TaskResult, user_id: int, updater_name: str
    ) -> NotificationDispatchResult:
        return await self._dispatch(
            NotificationType.UPDATED, task, user_id, updater_name
        )

    async def notify_completed(
        self, task: TaskResult, user_id: int, completer_name: str
    ) -> NotificationDispatchResult:
        return await self._dispatch(
            NotificationType.COMPLETED, task, user_id, completer_name
        )

    async def _dispatch(
        self,
        kind: NotificationType,
        task: TaskResult,
        user_id: int,
        actor_name: str,
    ) -> NotificationDispatchResult:
        try:
            user = await self.user_repo.get_by_id(user_id)
        except Exception as e:
            logger.warning(
                "Notification %s for task %s skipped: lookup of user %s failed: %s",
                kind.value,
                task.id,
                user_id,
                e,
            )
            add_span_event(
                "notification.recipient_lookup_failed",
                {"user_id": user_id, "task_id": task.id, "error": type(e).__name__},
            )
            return NotificationDispatchResult()
        if user is None:
            logger.debug("Notification %s for unknown user %s skipped", kind.value, user_id)
            return NotificationDispatchResult()

        notification = TaskNotification(
            type=kind,
            user_id=user_id,
            task_id=task.id,
            task_title=task.title,
            message=build_message(kind, actor_name, task.title),
            timestamp=utc_now(),
        )
        result = NotificationDispatchResult(notification=notification)
        if self.outbox is not None:
            self.outbox.add(partial(self._deliver, notification, user, result))
        else:
            await self._deliver(notification, user, result)
        return result

    async def _deliver(
        self,
        notification: TaskNotification,
        user: UserResult,
        result: NotificationDispatchResult,
    ) -> None:
        if user.notification_preferences.in_app:
            await self._push(notification, result)
        if email_enabled_for(user, notification.type):
            await self._email(notification, user, result)

    async def _push(
        self, notification: TaskNotification, result: NotificationDispatchResult
    ) -> None:
        if self.connections is None:
            return
        try:
            if not self.connections.is_connected(notification.user_id):
                return
            sent = await self.connections.push(
                notification.user_id, notification.to_message()
            )
        except Exception as e:
            self._record_failure(NotificationChannel.IN_APP, notification, e, result)
            return
        if sent:
            result.delivered.append(NotificationChannel.IN_APP)

    async def _email(
        self,
        notification: TaskNotification,
        user: UserResult,
        result: NotificationDispatchResult,
    ) -> None:
        if self.mail_transport is None or self.renderer is None:
            return
        try:
            email = self.renderer.render(notification, user.name)
            await self.mail_transport.send(user.email, email.subject, email.html)
        except Exception as e:
            self._record_failure(NotificationChannel.EMAIL, notification, e, result)
            return
        result.delivered.append(NotificationChannel.EMAIL)

    @staticmethod
    def _record_failure(
        channel: NotificationChannel,
        notification: TaskNotification,
        error: Exception,
        result: NotificationDispatchResult,
    ) -> None:
        logger.warning(
            "Notification %s via %s to user %s for task %s failed: %s",
            notification.type.value,
            channel.value,
            notification.user_id,
            notification.task_id,
            error,
        )
        add_span_event(
            "notification.delivery_failed",
            {
                "channel": channel.value,
                "user_id": notification.user_id,
                "task_id": notification.task_id,
                "error": type(error).__name__,
            },
        )
        result.failed.append(channel)
