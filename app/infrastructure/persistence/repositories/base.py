"""Base repository: generic CRUD and lifecycle hooks (cache invalidation, audit)."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.database import Base


class BaseRepository[ModelType: Base]:
    """Base repository with get_by_id, get_or_raise, create, update, delete and hooks.

    Subclasses override _on_after_create, _on_after_update, _on_before_delete
    for cache invalidation and audit. LSP: subclasses are substitutable for
    BaseRepository.
    """

    resource_type: str = "resource"

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def get_or_raise(self, entity_id: str) -> ModelType:
        """Return record by primary key or raise ResourceNotFoundException."""
        obj = await self.get_by_id(entity_id)
        if obj is None:
            raise ResourceNotFoundException(self.resource_type, entity_id)
        return obj

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record and run _on_after_create hook."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_create(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """Flush changes to an attached record and run _on_after_update hook."""
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_update(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        """Run _on_before_delete hook then delete the record."""
        await self._on_before_delete(obj)
        await self.db.delete(obj)
        await self.db.flush()

    async def _on_after_create(self, obj: ModelType) -> None:
        """Override in subclasses to invalidate caches or emit events."""

    async def _on_after_update(self, obj: ModelType) -> None:
        """Override in subclasses to invalidate caches or emit events."""

    async def _on_before_delete(self, obj: ModelType) -> None:
        """Override in subclasses to invalidate caches or emit events."""
