"""Workflow repository integration tests (SQLite in-memory; session rolled back after each test)."""

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from app.application.dtos.workflow import (
    WorkflowExecutionCreate,
    WorkflowRuleCreate,
    WorkflowTemplateCreate,
)
from app.domain.exceptions import (
    ExecutionStateException,
    ResourceNotFoundException,
    ValidationException,
)
from app.infrastructure.cache.keys import workflow_rules_by_trigger_key
from app.infrastructure.persistence.database import run_after_commit
from app.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from app.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowExecutionRepository,
    WorkflowRuleRepository,
    WorkflowTemplateRepository,
)
from app.infrastructure.services.system_audit_service import SystemAuditService
from app.shared.enums import (
    WorkflowExecutionStatus,
    WorkflowTemplateCategory,
    WorkflowTrigger,
)

TAG_ACTION = {"type": "add_tag", "params": {"tag_id": "vip"}}


class DictCache:
    """Cache double backed by a dict; records every key operation."""

    def __init__(self) -> None:
        self.store: dict[str, Any] = {}
        self.deleted: list[str] = []
        self.available = True

    def is_available(self) -> bool:
        return self.available

    async def get(self, key: str) -> Any:
        return self.store.get(key)

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        self.store[key] = value
        return True

    async def delete(self, key: str) -> bool:
        self.deleted.append(key)
        return self.store.pop(key, None) is not None


def _rule(name: str, trigger=WorkflowTrigger.CLIENT_CREATED, **kwargs) -> WorkflowRuleCreate:
    kwargs.setdefault("actions", [TAG_ACTION])
    return WorkflowRuleCreate(name=name, trigger=trigger, **kwargs)


async def test_create_and_get_rule(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    created = await repo.create_rule(
        _rule(
            "Welcome",
            conditions=[{"field": "source", "operator": "equals", "value": "web"}],
            priority=5,
            created_by="user-1",
        )
    )
    assert created.id
    assert created.trigger == WorkflowTrigger.CLIENT_CREATED
    assert created.enabled is True
    assert created.created_at is not None
    assert created.created_at.tzinfo is not None

    found = await repo.get_rule(created.id)
    assert found is not None
    assert found.name == "Welcome"
    assert found.priority == 5
    assert found.created_by == "user-1"
    assert found.conditions[0].field == "source"
    assert found.actions[0].type == "add_tag"
    assert found.actions[0].params == {"tag_id": "vip"}


async def test_get_rule_missing_returns_none(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    assert await repo.get_rule("missing-rule") is None


async def test_create_rule_without_actions_is_rejected(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    with pytest.raises(ValidationException) as exc_info:
        await repo.create_rule(_rule("Empty", actions=[]))
    assert exc_info.value.details["field"] == "actions"


async def test_list_rules_orders_by_priority_then_creation(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    low = await repo.create_rule(_rule("low", priority=1))
    first_high = await repo.create_rule(_rule("high-a", priority=10))
    second_high = await repo.create_rule(_rule("high-b", priority=10))
    disabled = await repo.create_rule(_rule("off", priority=50, enabled=False))

    all_rules = await repo.list_rules()
    assert [r.id for r in all_rules] == [disabled.id, first_high.id, second_high.id, low.id]

    enabled = await repo.list_rules(enabled_only=True)
    assert [r.id for r in enabled] == [first_high.id, second_high.id, low.id]


async def test_get_by_trigger_returns_enabled_rules_for_that_trigger(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    wanted = await repo.create_rule(_rule("created", priority=1))
    await repo.create_rule(_rule("created-off", enabled=False))
    await repo.create_rule(_rule("tagged", trigger=WorkflowTrigger.TAG_ADDED))
    top = await repo.create_rule(_rule("created-top", priority=9))

    rules = await repo.get_by_trigger(WorkflowTrigger.CLIENT_CREATED)
    assert [r.id for r in rules] == [top.id, wanted.id]

    by_value = await repo.get_by_trigger("client_created")
    assert [r.id for r in by_value] == [top.id, wanted.id]


async def test_update_rule_applies_changes_and_stamps_updated_at(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    created = await repo.create_rule(_rule("before"))

    updated = await repo.update_rule(
        created.id,
        {
            "name": "after",
            "priority": 3,
            "trigger": WorkflowTrigger.TAG_ADDED,
            "actions": [{"type": "remove_tag", "params": {"tag_id": "lead"}}],
        },
    )
    assert updated.name == "after"
    assert updated.priority == 3
    assert updated.trigger == WorkflowTrigger.TAG_ADDED
    assert updated.actions[0].type == "remove_tag"
    assert updated.updated_at >= created.updated_at
    assert updated.created_at == created.created_at


async def test_update_rule_rejects_unknown_field(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    created = await repo.create_rule(_rule("rule"))
    with pytest.raises(ValidationException) as exc_info:
        await repo.update_rule(created.id, {"created_at": datetime.now(UTC)})
    assert exc_info.value.details["field"] == "created_at"


async def test_update_rule_rejects_empty_actions(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    created = await repo.create_rule(_rule("rule"))
    with pytest.raises(ValidationException):
        await repo.update_rule(created.id, {"actions": []})


async def test_update_missing_rule_raises_not_found(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    with pytest.raises(ResourceNotFoundException):
        await repo.update_rule("missing", {"name": "x"})


async def test_toggle_and_delete_rule(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    created = await repo.create_rule(_rule("rule"))

    disabled = await repo.toggle_rule(created.id, False)
    assert disabled.enabled is False
    assert await repo.get_by_trigger(WorkflowTrigger.CLIENT_CREATED) == []

    await repo.delete_rule(created.id)
    assert await repo.get_rule(created.id) is None
    with pytest.raises(ResourceNotFoundException):
        await repo.delete_rule(created.id)


async def test_rule_writes_are_audited(db_session) -> None:
    audit_repo = AuditLogRepository(db_session)
    repo = WorkflowRuleRepository(db_session, SystemAuditService(audit_repo))

    created = await repo.create_rule(_rule("audited"))
    await repo.update_rule(created.id, {"name": "audited-2"})
    await repo.toggle_rule(created.id, False)
    await repo.toggle_rule(created.id, True)
    await repo.delete_rule(created.id)

    entries = await audit_repo.list(entity_type="workflow_rule", entity_id=created.id)
    assert sorted(e.action for e in entries) == sorted(
        ["created", "updated", "deactivated", "activated", "deleted"]
    )
    created_entry = next(e for e in entries if e.action == "created")
    assert created_entry.actor_type == "system"
    assert created_entry.entity_data["action_types"] == ["add_tag"]


async def test_audit_can_be_disabled(db_session) -> None:
    audit_repo = AuditLogRepository(db_session)
    repo = WorkflowRuleRepository(
        db_session, SystemAuditService(audit_repo), enable_audit=False
    )
    await repo.create_rule(_rule("quiet"))
    assert await audit_repo.list(entity_type="workflow_rule") == []


async def test_get_by_trigger_reads_through_cache(db_session) -> None:
    cache = DictCache()
    repo = WorkflowRuleRepository(db_session, cache=cache)
    created = await repo.create_rule(_rule("cached", priority=2))
    key = workflow_rules_by_trigger_key("client_created")

    first = await repo.get_by_trigger(WorkflowTrigger.CLIENT_CREATED)
    assert key in cache.store
    assert cache.store[key][0]["id"] == created.id

    second = await repo.get_by_trigger(WorkflowTrigger.CLIENT_CREATED)
    assert [r.id for r in second] == [r.id for r in first]
    assert second[0].priority == 2
    assert second[0].actions[0].params == {"tag_id": "vip"}
    assert second[0].created_at == first[0].created_at


async def test_rule_writes_invalidate_trigger_cache(db_session) -> None:
    cache = DictCache()
    repo = WorkflowRuleRepository(db_session, cache=cache)
    created = await repo.create_rule(_rule("moving"))
    old_key = workflow_rules_by_trigger_key("client_created")
    new_key = workflow_rules_by_trigger_key("tag_added")

    await repo.get_by_trigger(WorkflowTrigger.CLIENT_CREATED)
    assert old_key in cache.store

    await repo.update_rule(created.id, {"trigger": WorkflowTrigger.TAG_ADDED})
    assert old_key not in cache.store
    assert new_key in cache.deleted

    await repo.get_by_trigger(WorkflowTrigger.TAG_ADDED)
    await repo.toggle_rule(created.id, False)
    assert new_key not in cache.store
    assert await repo.get_by_trigger(WorkflowTrigger.TAG_ADDED) == []


async def test_unavailable_cache_is_bypassed(db_session) -> None:
    cache = DictCache()
    cache.available = False
    repo = WorkflowRuleRepository(db_session, cache=cache)
    await repo.create_rule(_rule("no-cache"))

    rules = await repo.get_by_trigger(WorkflowTrigger.CLIENT_CREATED)
    assert len(rules) == 1
    assert cache.store == {}


def _execution(rule_id: str, status: WorkflowExecutionStatus, started_at: datetime, **kwargs):
    return WorkflowExecutionCreate(
        workflow_id=rule_id,
        workflow_name="rule",
        trigger="client_created",
        trigger_data={"client_id": "c1"},
        conditions_met=status != WorkflowExecutionStatus.SKIPPED,
        status=status,
        started_at=started_at,
        **kwargs,
    )


async def test_execution_lifecycle(db_session) -> None:
    repo = WorkflowExecutionRepository(db_session)
    started = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    running = await repo.create_execution(
        _execution("rule-1", WorkflowExecutionStatus.RUNNING, started)
    )
    assert running.status == WorkflowExecutionStatus.RUNNING
    assert running.completed_at is None
    assert running.trigger_data == {"client_id": "c1"}

    finished = started + timedelta(milliseconds=250)
    completed = await repo.update_execution(
        running.id,
        {
            "status": WorkflowExecutionStatus.COMPLETED,
            "actions_executed": [
                {"action_type": "add_tag", "action_config": {}, "status": "completed"}
            ],
            "completed_at": finished,
            "duration": 250,
        },
    )
    assert completed.status == WorkflowExecutionStatus.COMPLETED
    assert completed.completed_at == finished
    assert completed.duration == 250
    assert completed.actions_executed[0].action_type == "add_tag"

    with pytest.raises(ExecutionStateException):
        await repo.update_execution(running.id, {"error": "late"})

    fetched = await repo.get_execution(running.id)
    assert fetched is not None
    assert fetched.is_terminal()


async def test_skipped_execution_is_immutable(db_session) -> None:
    repo = WorkflowExecutionRepository(db_session)
    started = datetime(2026, 1, 1, tzinfo=UTC)
    skipped = await repo.create_execution(
        _execution(
            "rule-1",
            WorkflowExecutionStatus.SKIPPED,
            started,
            completed_at=started,
            duration=0,
        )
    )
    with pytest.raises(ExecutionStateException):
        await repo.update_execution(skipped.id, {"status": WorkflowExecutionStatus.RUNNING})


async def test_update_execution_rejects_unknown_field(db_session) -> None:
    repo = WorkflowExecutionRepository(db_session)
    running = await repo.create_execution(
        _execution("rule-1", WorkflowExecutionStatus.RUNNING, datetime.now(UTC))
    )
    with pytest.raises(ValidationException):
        await repo.update_execution(running.id, {"workflow_id": "other"})


async def test_update_missing_execution_raises_not_found(db_session) -> None:
    repo = WorkflowExecutionRepository(db_session)
    with pytest.raises(ResourceNotFoundException):
        await repo.update_execution("missing", {"error": "x"})


async def test_list_executions_newest_first_with_filter_and_limit(db_session) -> None:
    repo = WorkflowExecutionRepository(db_session)
    base = datetime(2026, 3, 1, tzinfo=UTC)
    oldest = await repo.create_execution(
        _execution("rule-a", WorkflowExecutionStatus.RUNNING, base)
    )
    middle = await repo.create_execution(
        _execution("rule-b", WorkflowExecutionStatus.RUNNING, base + timedelta(minutes=1))
    )
    newest = await repo.create_execution(
        _execution("rule-a", WorkflowExecutionStatus.RUNNING, base + timedelta(minutes=2))
    )

    everything = await repo.list_executions()
    assert [e.id for e in everything] == [newest.id, middle.id, oldest.id]

    for_rule_a = await repo.list_executions(workflow_id="rule-a")
    assert [e.id for e in for_rule_a] == [newest.id, oldest.id]

    limited = await repo.list_executions(limit=1)
    assert [e.id for e in limited] == [newest.id]


async def test_templates_create_get_and_list(db_session) -> None:
    repo = WorkflowTemplateRepository(db_session)
    public = await repo.create_template(
        WorkflowTemplateCreate(
            name="Welcome series",
            description="Greets new clients",
            category=WorkflowTemplateCategory.WELCOME,
            trigger=WorkflowTrigger.CLIENT_CREATED,
            actions=[{"type": "send_email", "params": {"subject": "Hi", "body": "Welcome"}}],
        )
    )
    private = await repo.create_template(
        WorkflowTemplateCreate(
            name="Internal",
            description="Team only",
            category=WorkflowTemplateCategory.CUSTOM,
            trigger=WorkflowTrigger.TAG_ADDED,
            actions=[TAG_ACTION],
            is_public=False,
        )
    )

    fetched = await repo.get_template(public.id)
    assert fetched is not None
    assert fetched.category == WorkflowTemplateCategory.WELCOME
    assert fetched.actions[0].type == "send_email"
    assert await repo.get_template("missing") is None

    assert [t.id for t in await repo.list_templates()] == [public.id]
    all_ids = {t.id for t in await repo.list_templates(public_only=False)}
    assert all_ids == {public.id, private.id}


async def test_template_without_actions_is_rejected(db_session) -> None:
    repo = WorkflowTemplateRepository(db_session)
    with pytest.raises(ValidationException):
        await repo.create_template(
            WorkflowTemplateCreate(
                name="Empty",
                description="",
                category=WorkflowTemplateCategory.CUSTOM,
                trigger=WorkflowTrigger.CLIENT_CREATED,
                actions=[],
            )
        )


async def test_cache_is_invalidated_again_after_commit(session_factory) -> None:
    cache = DictCache()
    key = workflow_rules_by_trigger_key(WorkflowTrigger.CLIENT_CREATED.value)
    async with session_factory() as session:
        async with session.begin():
            repo = WorkflowRuleRepository(session, cache=cache)
            await repo.create_rule(_rule("fresh"))
            # Another request refills the key from pre-commit rows.
            cache.store[key] = [{"id": "stale"}]
        assert key in cache.store
        await run_after_commit(session)
    assert key not in cache.store
    assert cache.deleted == [key, key]


async def test_deleting_a_rule_keeps_its_execution_history(db_session) -> None:
    rules = WorkflowRuleRepository(db_session)
    executions = WorkflowExecutionRepository(db_session)
    rule = await rules.create_rule(_rule("short-lived"))
    recorded = await executions.create_execution(
        _execution(rule.id, WorkflowExecutionStatus.RUNNING, datetime(2026, 1, 1, tzinfo=UTC))
    )
    await rules.delete_rule(rule.id)

    assert await rules.get_rule(rule.id) is None
    [kept] = await executions.list_executions(workflow_id=rule.id)
    assert kept.id == recorded.id
    assert kept.workflow_name == "rule"
