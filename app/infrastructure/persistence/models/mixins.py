"""SQLAlchemy mixins for common model patterns.

Provides: IntegerIdMixin, TimestampMixin, VersionedMixin.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from app.shared.utils.datetime import utc_now


class IntegerIdMixin:
    """Mixin for models keyed by an autoincrement integer id."""

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(Integer, primary_key=True, autoincrement=True)


class TimestampMixin:
    """Mixin for created_at and updated_at (timezone-aware, set at write time)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            server_default=func.now(),
            nullable=False,
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            server_default=func.now(),
            onupdate=utc_now,
            nullable=False,
        )


class VersionedMixin:
    """Mixin for optimistic locking: version integer, starts at 1."""

    @declared_attr
    def version(cls) -> Mapped[int]:
        return mapped_column(Integer, default=1, server_default="1", nullable=False)
