"""System audit service: appends audit events to the audit_log table (implements IAuditService)."""

from __future__ import annotations

from typing import Any

from pydantic_core import to_jsonable_python

from app.application.dtos.audit_log import AuditLogEntryCreate
from app.application.interfaces.repositories import IAuditLogRepository
from app.shared.context import get_current_request_id
from app.shared.enums import ActorType, AuditAction
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class SystemAuditService:
    """Emits rule-management audit events (who changed which rule, and how)."""

    def __init__(self, audit_log_repo: IAuditLogRepository) -> None:
        self.audit_log_repo = audit_log_repo

    async def emit_audit_event(
        self,
        entity_type: str,
        action: AuditAction,
        entity_id: str,
        entity_data: dict[str, Any],
        actor_id: str | None = None,
        actor_type: ActorType | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Emit one audit event."""
        await self.audit_log_repo.create(
            AuditLogEntryCreate(
                actor_id=actor_id,
                actor_type=(actor_type or ActorType.SYSTEM).value,
                action=getattr(action, "value", action),
                entity_type=entity_type,
                entity_id=entity_id,
                entity_data=to_jsonable_python(entity_data),
                metadata=to_jsonable_python(metadata) if metadata else None,
                request_id=get_current_request_id(),
            )
        )
        logger.debug(
            "Emitted audit event for %s.%s (entity_id: %s)",
            entity_type,
            getattr(action, "value", action),
            entity_id,
        )
