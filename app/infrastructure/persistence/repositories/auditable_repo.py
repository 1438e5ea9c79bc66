"""Repository base that writes an audit trail entry for every rule-management write.

The entry records the actor from the request context (see
app.shared.context) and a compact snapshot of the entity. A failing audit
write is logged and never fails the change that produced it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.context import get_actor_context
from app.shared.enums import AuditAction
from app.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.application.interfaces.services import IAuditService

logger = get_logger(__name__)


class AuditableRepository[ModelType: Base](BaseRepository[ModelType]):
    """BaseRepository whose create/update/delete hooks emit audit events.

    Subclasses set audit_entity_type and implement audit_snapshot. Without
    an audit service (or with enable_audit=False) the hooks are no-ops, which
    is what read paths and the trigger processor use.
    """

    audit_entity_type: ClassVar[str] = "resource"

    def __init__(
        self,
        db: AsyncSession,
        model: type[ModelType],
        audit_service: IAuditService | None = None,
        *,
        enable_audit: bool = True,
    ) -> None:
        super().__init__(db, model)
        self.audit_service = audit_service
        self.audit_enabled = enable_audit and audit_service is not None

    def audit_snapshot(self, obj: ModelType) -> dict[str, Any]:
        """Fields of obj worth keeping in the trail. Override per entity."""
        return {"id": getattr(obj, "id", None)}

    async def record_audit(
        self,
        action: AuditAction,
        obj: ModelType,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Append one audit entry for obj (activated/deactivated and other non-CRUD actions)."""
        if not self.audit_enabled or self.audit_service is None:
            return
        actor = get_actor_context()
        try:
            async with self.db.begin_nested():
                await self.audit_service.emit_audit_event(
                    entity_type=self.audit_entity_type,
                    action=action,
                    entity_id=str(getattr(obj, "id", "")),
                    entity_data=self.audit_snapshot(obj),
                    actor_id=actor.actor_id,
                    actor_type=actor.actor_type,
                    metadata=metadata,
                )
        except Exception:
            logger.warning(
                "Audit entry %s.%s for %s was not written",
                self.audit_entity_type,
                action.value,
                getattr(obj, "id", "?"),
                exc_info=True,
            )

    async def flush_quietly(self, obj: ModelType) -> ModelType:
        """Flush pending changes on obj without the UPDATED audit entry."""
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _on_after_create(self, obj: ModelType) -> None:
        await super()._on_after_create(obj)
        await self.record_audit(AuditAction.CREATED, obj)

    async def _on_after_update(self, obj: ModelType) -> None:
        await super()._on_after_update(obj)
        await self.record_audit(AuditAction.UPDATED, obj)

    async def _on_before_delete(self, obj: ModelType) -> None:
        await super()._on_before_delete(obj)
        await self.record_audit(AuditAction.DELETED, obj)
