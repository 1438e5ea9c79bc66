"""Audit log is append-only: entries can be written and read but never changed."""

import pytest

from app.application.dtos.audit_log import AuditLogEntryCreate
from app.infrastructure.persistence.models.audit_log import AuditLog
from app.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from app.infrastructure.services.system_audit_service import SystemAuditService
from app.shared.context import clear_current_actor, set_current_actor
from app.shared.enums import ActorType, AuditAction


def _entry(entity_id: str = "rule-1", action: str = "created") -> AuditLogEntryCreate:
    return AuditLogEntryCreate(
        actor_id="user-1",
        actor_type="user",
        action=action,
        entity_type="workflow_rule",
        entity_id=entity_id,
        entity_data={"name": "Welcome"},
        metadata=None,
        request_id=None,
    )


async def test_create_and_list_entries(db_session) -> None:
    repo = AuditLogRepository(db_session)
    created = await repo.create(_entry())
    await repo.create(_entry(entity_id="rule-2"))

    assert created.id
    assert created.timestamp.tzinfo is not None
    assert created.entity_data == {"name": "Welcome"}

    only_first = await repo.list(entity_id="rule-1")
    assert [e.id for e in only_first] == [created.id]
    assert len(await repo.list(entity_type="workflow_rule")) == 2
    assert len(await repo.list(limit=1)) == 1


async def test_entries_cannot_be_updated(db_session) -> None:
    repo = AuditLogRepository(db_session)
    created = await repo.create(_entry())
    row = await db_session.get(AuditLog, created.id)
    row.action = "deleted"
    with pytest.raises(ValueError, match="immutable"):
        await db_session.flush()


async def test_entries_cannot_be_deleted(db_session) -> None:
    repo = AuditLogRepository(db_session)
    created = await repo.create(_entry())
    row = await db_session.get(AuditLog, created.id)
    await db_session.delete(row)
    with pytest.raises(ValueError, match="cannot be deleted"):
        await db_session.flush()


async def test_system_audit_service_records_request_id(db_session) -> None:
    repo = AuditLogRepository(db_session)
    service = SystemAuditService(repo)
    set_current_actor("user-9", ActorType.USER, request_id="req-123")
    try:
        await service.emit_audit_event(
            entity_type="workflow_rule",
            action=AuditAction.ACTIVATED,
            entity_id="rule-1",
            entity_data={"enabled": True},
            actor_id="user-9",
            actor_type=ActorType.USER,
            metadata={"reason": "launch"},
        )
    finally:
        clear_current_actor()

    [entry] = await repo.list(entity_id="rule-1")
    assert entry.action == "activated"
    assert entry.actor_type == "user"
    assert entry.request_id == "req-123"
    assert entry.metadata == {"reason": "launch"}
