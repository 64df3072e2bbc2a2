"""User account use cases."""

from app.application.use_cases.users.user_manager import UserManager

__all__ = ["UserManager"]
