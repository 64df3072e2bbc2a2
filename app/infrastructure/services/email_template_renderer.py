"""Email templates for task notifications: notification type -> subject/HTML body (Jinja)."""

from __future__ import annotations

from jinja2 import DictLoader, Environment, Template, select_autoescape

from app.application.dtos.notification import RenderedEmail, TaskNotification
from app.shared.enums import NotificationType

_LAYOUT = """\
<p>Hello {{ recipient_name }},</p>
<p>{{ notification.message }}</p>
{% block details %}{% endblock %}
<p><a href="{{ app_url }}/tasks/{{ notification.task_id }}">Open the task</a></p>
<p>Best regards,<br>{{ app_name }}</p>
"""

# notification type -> (subject_template, body_template)
_DEFAULT_TEMPLATES: dict[NotificationType, tuple[str, str]] = {
    NotificationType.ASSIGNED: (
        "New Task Assigned: {{ notification.task_title }}",
        "{% extends 'layout' %}{% block details %}"
        "<p>Title: {{ notification.task_title }}</p>{% endblock %}",
    ),
    NotificationType.UPDATED: (
        "Task Updated: {{ notification.task_title }}",
        "{% extends 'layout' %}{% block details %}"
        "<p>Title: {{ notification.task_title }}</p>{% endblock %}",
    ),
    NotificationType.COMPLETED: (
        "Task Completed: {{ notification.task_title }}",
        "{% extends 'layout' %}{% block details %}"
        "<p>Title: {{ notification.task_title }}<br>"
        "Completed on: {{ notification.timestamp.strftime('%Y-%m-%d') }}</p>{% endblock %}",
    ),
}


class EmailTemplateRenderer:
    """Renders subject and HTML body for a task notification (IEmailTemplateRenderer).

    Bodies are autoescaped; task titles and names are user input.
    """

    def __init__(
        self,
        app_name: str,
        app_url: str,
        templates: dict[NotificationType, tuple[str, str]] | None = None,
    ) -> None:
        self._app_name = app_name
        self._app_url = app_url.rstrip("/")
        self._env = Environment(
            loader=DictLoader({"layout": _LAYOUT}),
            autoescape=select_autoescape(default_for_string=True, default=True),
        )
        self._subject_env = Environment(autoescape=False)
        self._compiled: dict[NotificationType, tuple[Template, Template]] = {
            kind: (
                self._subject_env.from_string(subject),
                self._env.from_string(body),
            )
            for kind, (subject, body) in (templates or _DEFAULT_TEMPLATES).items()
        }

    def render(self, notification: TaskNotification, recipient_name: str) -> RenderedEmail:
        """Render the email. Raises KeyError if no template exists for the type."""
        if notification.type not in self._compiled:
            raise KeyError(f"No email template for notification type: {notification.type}")
        ctx = {
            "notification": notification,
            "recipient_name": recipient_name,
            "app_name": self._app_name,
            "app_url": self._app_url,
        }
        subject_tpl, body_tpl = self._compiled[notification.type]
        subject = " ".join(subject_tpl.render(**ctx).split())
        return RenderedEmail(subject=subject, html=body_tpl.render(**ctx))

