"""Audit log repository. Append-only; implements IAuditLogRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
from app.infrastructure.persistence.models.audit_log import AuditLog
from app.shared.utils.datetime import ensure_utc


def _orm_to_result(row: AuditLog) -> AuditLogResult:
    """Map ORM to application DTO."""
    return AuditLogResult(
        id=row.id,
        actor_id=row.actor_id,
        actor_type=row.actor_type,
        action=row.action,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        entity_data=dict(row.entity_data or {}),
        metadata=row.event_metadata,
        request_id=row.request_id,
        timestamp=ensure_utc(row.timestamp),  # type: ignore[arg-type]
    )


class AuditLogRepository:
    """Append-only audit log repository. No update/delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit log entry; return created record."""
        row = AuditLog(
            actor_id=entry.actor_id,
            actor_type=entry.actor_type,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            entity_data=entry.entity_data,
            event_metadata=entry.metadata,
            request_id=entry.request_id,
        )
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        return _orm_to_result(row)

    async def list(
        self,
        *,
        entity_type: str | None = None,
        entity_id: str | None = None,
        limit: int = 100,
    ) -> list[AuditLogResult]:
        """List audit log entries with optional filters (newest first)."""
        stmt = select(AuditLog)
        if entity_type is not None:
            stmt = stmt.where(AuditLog.entity_type == entity_type)
        if entity_id is not None:
            stmt = stmt.where(AuditLog.entity_id == entity_id)
        stmt = stmt.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit)
        result = await self.db.execute(stmt)
        return [_orm_to_result(r) for r in result.scalars().all()]
