"""Base repository: primary-key lookup, paging, add and delete for one model."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with _get, _list, _add and _remove over a single model.

    Subclasses expose DTO-returning methods (the application ports) and use
    these helpers for the ORM side.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get(self, entity_id: int) -> ModelType | None:
        """Return a single record by primary key, or None."""
        return await self.db.get(self.model, entity_id)

    async def _list(self, stmt: Any) -> list[ModelType]:
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _page(
        self, *order_by: Any, skip: int = 0, limit: int = 100
    ) -> list[ModelType]:
        """Return records ordered by order_by with pagination."""
        return await self._list(
            select(self.model).order_by(*order_by).offset(skip).limit(limit)
        )

    async def _add(self, obj: ModelType) -> ModelType:
        """Persist a new record and load server-side defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _remove(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()
