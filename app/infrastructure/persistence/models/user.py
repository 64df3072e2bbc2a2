"""User ORM model: identity, role, and notification preferences."""

from typing import Any

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import UserRole
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import IntegerIdMixin, TimestampMixin

JSONType = JSON().with_variant(JSONB(), "postgresql")


class User(IntegerIdMixin, TimestampMixin, Base):
    """Application user. Password stored as bcrypt hash only."""

    __tablename__ = "app_user"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.USER.value
    )
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notification_preferences: Mapped[dict[str, Any] | None] = mapped_column(
        JSONType, nullable=True
    )
