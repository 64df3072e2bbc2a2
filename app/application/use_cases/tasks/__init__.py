"""Task use cases."""

from app.application.use_cases.tasks.task_manager import TaskManager

__all__ = ["TaskManager"]
