"""Unit tests for SystemAuditService."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

from app.infrastructure.services.system_audit_service import SystemAuditService
from app.shared.context import clear_current_actor, set_current_actor
from app.shared.enums import ActorType, AuditAction


async def test_emit_audit_event_builds_entry_with_request_id() -> None:
    repo = AsyncMock()
    service = SystemAuditService(repo)
    set_current_actor("user-1", ActorType.USER, request_id="req-7")
    try:
        await service.emit_audit_event(
            entity_type="workflow_rule",
            action=AuditAction.ACTIVATED,
            entity_id="r1",
            entity_data={"id": "r1", "at": datetime(2026, 1, 1, tzinfo=UTC)},
            actor_id="user-1",
            actor_type=ActorType.USER,
            metadata={"enabled": True},
        )
    finally:
        clear_current_actor()
    entry = repo.create.await_args.args[0]
    assert entry.action == "activated"
    assert entry.actor_type == "user"
    assert entry.request_id == "req-7"
    assert entry.entity_data == {"id": "r1", "at": "2026-01-01T00:00:00Z"}
    assert entry.metadata == {"enabled": True}


async def test_defaults_to_system_actor() -> None:
    repo = AsyncMock()
    await SystemAuditService(repo).emit_audit_event(
        "workflow_rule", AuditAction.DELETED, "r1", {"id": "r1"}
    )
    entry = repo.create.await_args.args[0]
    assert entry.actor_id is None
    assert entry.actor_type == "system"
    assert entry.metadata is None
