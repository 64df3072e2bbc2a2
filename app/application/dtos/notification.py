"""DTOs for task notifications (transient; never persisted)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.shared.enums import NotificationChannel, NotificationType


@dataclass(frozen=True)
class TaskNotification:
    """One task event addressed to one user."""

    type: NotificationType
    user_id: int
    task_id: int
    task_title: str
    message: str
    timestamp: datetime

    def to_message(self) -> dict[str, Any]:
        """Live-socket envelope pushed to the client."""
        ts = self.timestamp.isoformat()
        return {
            "type": "notification",
            "data": {
                "type": self.type.value,
                "taskId": self.task_id,
                "taskTitle": self.task_title,
                "message": self.message,
                "timestamp": ts,
            },
            "timestamp": ts,
        }


@dataclass(frozen=True)
class RenderedEmail:
    """Subject and HTML body produced by the email template renderer."""

    subject: str
    html: str


@dataclass
class NotificationDispatchResult:
    """Which channels delivered a notification, and which failed."""

    notification: TaskNotification | None = None
    delivered: list[NotificationChannel] = field(default_factory=list)
    failed: list[NotificationChannel] = field(default_factory=list)

    @property
    def pushed(self) -> bool:
        return NotificationChannel.IN_APP in self.delivered

    @property
    def emailed(self) -> bool:
        return NotificationChannel.EMAIL in self.delivered
