"""Workflow rule, execution and template repositories."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic_core import to_jsonable_python
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.workflow import (
    EXECUTION_UPDATABLE_FIELDS,
    RULE_UPDATABLE_FIELDS,
    WorkflowExecutionCreate,
    WorkflowRuleCreate,
    WorkflowTemplateCreate,
)
from app.domain.entities.workflow import (
    WorkflowActionConfig,
    WorkflowActionExecution,
    WorkflowCondition,
    WorkflowExecution,
    WorkflowRule,
    WorkflowTemplate,
)
from app.domain.exceptions import ExecutionStateException, ValidationException
from app.infrastructure.cache.keys import workflow_rules_by_trigger_key
from app.infrastructure.persistence.database import after_commit
from app.infrastructure.persistence.models.workflow import (
    WorkflowExecution as WorkflowExecutionModel,
    WorkflowRule as WorkflowRuleModel,
    WorkflowTemplate as WorkflowTemplateModel,
)
from app.infrastructure.persistence.repositories.auditable_repo import (
    AuditableRepository,
)
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.enums import (
    AuditAction,
    WorkflowExecutionStatus,
    WorkflowTemplateCategory,
    WorkflowTrigger,
)
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc, utc_now

if TYPE_CHECKING:
    from app.application.interfaces.services import IAuditService
    from app.infrastructure.cache.cache_protocol import CacheProtocol

logger = get_logger(__name__)


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _parse_dt(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(str(value)))


def _rule_to_entity(row: WorkflowRuleModel) -> WorkflowRule:
    """Map ORM row to domain entity."""
    return WorkflowRule(
        id=row.id,
        name=row.name,
        description=row.description,
        trigger=WorkflowTrigger(row.trigger),
        trigger_config=dict(row.trigger_config or {}),
        conditions=[WorkflowCondition.from_dict(c) for c in row.conditions or []],
        actions=[WorkflowActionConfig.from_dict(a) for a in row.actions or []],
        enabled=row.enabled,
        priority=row.priority,
        created_by=row.created_by,
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


def _rule_from_cache(data: Mapping[str, Any]) -> WorkflowRule:
    return WorkflowRule(
        id=data["id"],
        name=data["name"],
        description=data.get("description"),
        trigger=WorkflowTrigger(data["trigger"]),
        trigger_config=dict(data.get("trigger_config") or {}),
        conditions=[WorkflowCondition.from_dict(c) for c in data.get("conditions") or []],
        actions=[WorkflowActionConfig.from_dict(a) for a in data.get("actions") or []],
        enabled=bool(data.get("enabled", True)),
        priority=int(data.get("priority", 0)),
        created_by=data.get("created_by"),
        created_at=_parse_dt(data.get("created_at")),
        updated_at=_parse_dt(data.get("updated_at")),
    )


def _execution_to_entity(row: WorkflowExecutionModel) -> WorkflowExecution:
    return WorkflowExecution(
        id=row.id,
        workflow_id=row.workflow_id,
        workflow_name=row.workflow_name,
        trigger=row.trigger,
        trigger_data=dict(row.trigger_data or {}),
        conditions_met=row.conditions_met,
        status=WorkflowExecutionStatus(row.status),
        started_at=ensure_utc(row.started_at),  # type: ignore[arg-type]
        actions_executed=[
            WorkflowActionExecution.from_dict(a) for a in row.actions_executed or []
        ],
        error=row.error,
        completed_at=ensure_utc(row.completed_at),
        duration=row.duration,
    )


def _template_to_entity(row: WorkflowTemplateModel) -> WorkflowTemplate:
    return WorkflowTemplate(
        id=row.id,
        name=row.name,
        description=row.description,
        category=WorkflowTemplateCategory(row.category),
        trigger=WorkflowTrigger(row.trigger),
        conditions=[WorkflowCondition.from_dict(c) for c in row.conditions or []],
        actions=[WorkflowActionConfig.from_dict(a) for a in row.actions or []],
        is_public=row.is_public,
        created_by=row.created_by,
        created_at=ensure_utc(row.created_at),
    )


def _require_actions(actions: Any) -> list[dict[str, Any]]:
    if not actions:
        raise ValidationException("A workflow rule needs at least one action", field="actions")
    return to_jsonable_python(list(actions))


class WorkflowRuleRepository(AuditableRepository[WorkflowRuleModel]):
    """Rule store (implements IWorkflowRuleRepository).

    Rules are ordered by priority desc, then creation order. get_by_trigger
    reads through the optional cache; every write invalidates the keys of
    the triggers it touches.
    """

    resource_type = "workflow"
    audit_entity_type = "workflow_rule"

    def __init__(
        self,
        db: AsyncSession,
        audit_service: IAuditService | None = None,
        cache: CacheProtocol | None = None,
        *,
        cache_ttl: int = 300,
        enable_audit: bool = True,
    ) -> None:
        super().__init__(db, WorkflowRuleModel, audit_service, enable_audit=enable_audit)
        self.cache = cache
        self.cache_ttl = cache_ttl

    def audit_snapshot(self, obj: WorkflowRuleModel) -> dict[str, Any]:
        return {
            "id": obj.id,
            "name": obj.name,
            "trigger": obj.trigger,
            "enabled": obj.enabled,
            "priority": obj.priority,
            "action_types": [a.get("type") for a in obj.actions or []],
            "condition_count": len(obj.conditions or []),
        }

    def _cache_usable(self) -> bool:
        return self.cache is not None and self.cache.is_available()

    async def _invalidate(self, *triggers: str) -> None:
        """Drop the cached rule lists for triggers now and again after commit.

        Until the write commits a concurrent reader can refill a key from the
        old rows, so the post-commit delete is the one that sticks.
        """
        keys = sorted({workflow_rules_by_trigger_key(t) for t in triggers if t})
        if not keys or not self._cache_usable():
            return
        await self._delete_keys(keys)
        after_commit(self.db, lambda: self._delete_keys(keys))

    async def _delete_keys(self, keys: list[str]) -> None:
        for key in keys:
            await self.cache.delete(key)  # type: ignore[union-attr]

    async def _on_after_create(self, obj: WorkflowRuleModel) -> None:
        await super()._on_after_create(obj)
        await self._invalidate(obj.trigger)

    async def _on_after_update(self, obj: WorkflowRuleModel) -> None:
        await super()._on_after_update(obj)
        await self._invalidate(obj.trigger)

    async def _on_before_delete(self, obj: WorkflowRuleModel) -> None:
        await super()._on_before_delete(obj)
        await self._invalidate(obj.trigger)

    async def create_rule(self, data: WorkflowRuleCreate) -> WorkflowRule:
        """Persist a new rule. Raises ValidationException when it has no actions."""
        row = WorkflowRuleModel(
            name=data.name,
            description=data.description,
            trigger=_enum_value(data.trigger),
            trigger_config=to_jsonable_python(dict(data.trigger_config or {})),
            conditions=to_jsonable_python(list(data.conditions or [])),
            actions=_require_actions(data.actions),
            enabled=data.enabled,
            priority=data.priority,
            created_by=data.created_by,
        )
        created = await self.create(row)
        logger.info("Created workflow rule %s on trigger %s", created.id, created.trigger)
        return _rule_to_entity(created)

    async def get_rule(self, rule_id: str) -> WorkflowRule | None:
        row = await self.get_by_id(rule_id)
        return _rule_to_entity(row) if row else None

    async def list_rules(self, *, enabled_only: bool = False) -> list[WorkflowRule]:
        q = select(WorkflowRuleModel)
        if enabled_only:
            q = q.where(WorkflowRuleModel.enabled.is_(True))
        q = q.order_by(
            WorkflowRuleModel.priority.desc(),
            WorkflowRuleModel.created_at.asc(),
            WorkflowRuleModel.id.asc(),
        )
        result = await self.db.execute(q)
        return [_rule_to_entity(r) for r in result.scalars().all()]

    async def get_by_trigger(self, trigger: WorkflowTrigger | str) -> list[WorkflowRule]:
        """Return enabled rules for trigger, highest priority first (cache read-through)."""
        trigger_value = _enum_value(trigger)
        key = workflow_rules_by_trigger_key(trigger_value)
        if self._cache_usable():
            cached = await self.cache.get(key)  # type: ignore[union-attr]
            if isinstance(cached, list):
                return [_rule_from_cache(d) for d in cached]

        result = await self.db.execute(
            select(WorkflowRuleModel)
            .where(
                WorkflowRuleModel.trigger == trigger_value,
                WorkflowRuleModel.enabled.is_(True),
            )
            .order_by(
                WorkflowRuleModel.priority.desc(),
                WorkflowRuleModel.created_at.asc(),
                WorkflowRuleModel.id.asc(),
            )
        )
        rules = [_rule_to_entity(r) for r in result.scalars().all()]
        if self._cache_usable():
            await self.cache.set(  # type: ignore[union-attr]
                key,
                to_jsonable_python([dataclasses.asdict(r) for r in rules]),
                ttl=self.cache_ttl,
            )
        return rules

    async def update_rule(self, rule_id: str, changes: Mapping[str, Any]) -> WorkflowRule:
        """Apply partial changes; stamps updated_at.

        Raises:
            ResourceNotFoundException: rule does not exist.
            ValidationException: a field is not updatable or actions would be empty.
        """
        unknown = set(changes) - RULE_UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        row = await self.get_or_raise(rule_id)
        previous_trigger = row.trigger
        for name, value in changes.items():
            if name == "actions":
                row.actions = _require_actions(value)
            elif name == "trigger":
                row.trigger = _enum_value(value)
            elif name == "conditions":
                row.conditions = to_jsonable_python(list(value or []))
            elif name == "trigger_config":
                row.trigger_config = to_jsonable_python(dict(value or {}))
            else:
                setattr(row, name, value)
        row.updated_at = utc_now()
        updated = await self.update(row)
        await self._invalidate(previous_trigger)
        return _rule_to_entity(updated)

    async def delete_rule(self, rule_id: str) -> None:
        """Hard delete. Raises ResourceNotFoundException if missing."""
        row = await self.get_or_raise(rule_id)
        await self.delete(row)
        logger.info("Deleted workflow rule %s", rule_id)

    async def toggle_rule(self, rule_id: str, enabled: bool) -> WorkflowRule:
        """Set the enabled flag only; audited as activated/deactivated."""
        row = await self.get_or_raise(rule_id)
        row.enabled = enabled
        row.updated_at = utc_now()
        updated = await self.flush_quietly(row)
        await self.record_audit(
            updated, AuditAction.ACTIVATED if enabled else AuditAction.DEACTIVATED
        )
        await self._invalidate(updated.trigger)
        return _rule_to_entity(updated)


class WorkflowExecutionRepository(BaseRepository[WorkflowExecutionModel]):
    """Execution recorder (implements IWorkflowExecutionRepository).

    Records become immutable once they reach a terminal status.
    """

    resource_type = "workflow_execution"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowExecutionModel)

    async def create_execution(self, data: WorkflowExecutionCreate) -> WorkflowExecution:
        row = WorkflowExecutionModel(
            workflow_id=data.workflow_id,
            workflow_name=data.workflow_name,
            trigger=data.trigger,
            trigger_data=to_jsonable_python(dict(data.trigger_data or {})),
            conditions_met=data.conditions_met,
            status=_enum_value(data.status),
            started_at=data.started_at,
            actions_executed=to_jsonable_python(list(data.actions_executed or [])),
            error=data.error,
            completed_at=data.completed_at,
            duration=data.duration,
        )
        return _execution_to_entity(await self.create(row))

    async def update_execution(
        self, execution_id: str, changes: Mapping[str, Any]
    ) -> WorkflowExecution:
        """Partial update.

        Raises:
            ResourceNotFoundException: execution does not exist.
            ExecutionStateException: execution is already completed/failed/skipped.
            ValidationException: a field is not updatable.
        """
        unknown = set(changes) - EXECUTION_UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        row = await self.get_or_raise(execution_id)
        if WorkflowExecutionStatus(row.status) in WorkflowExecutionStatus.terminal():
            raise ExecutionStateException(execution_id, row.status)
        for name, value in changes.items():
            if name == "status":
                row.status = _enum_value(value)
            elif name == "actions_executed":
                row.actions_executed = to_jsonable_python(list(value or []))
            else:
                setattr(row, name, value)
        return _execution_to_entity(await self.update(row))

    async def get_execution(self, execution_id: str) -> WorkflowExecution | None:
        row = await self.get_by_id(execution_id)
        return _execution_to_entity(row) if row else None

    async def list_executions(
        self, workflow_id: str | None = None, limit: int = 100
    ) -> list[WorkflowExecution]:
        """Newest first, optionally restricted to one rule."""
        q = select(WorkflowExecutionModel)
        if workflow_id is not None:
            q = q.where(WorkflowExecutionModel.workflow_id == workflow_id)
        q = q.order_by(
            WorkflowExecutionModel.started_at.desc(), WorkflowExecutionModel.id.desc()
        ).limit(limit)
        result = await self.db.execute(q)
        return [_execution_to_entity(r) for r in result.scalars().all()]


class WorkflowTemplateRepository(BaseRepository[WorkflowTemplateModel]):
    """Template store (implements IWorkflowTemplateRepository)."""

    resource_type = "workflow_template"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowTemplateModel)

    async def create_template(self, data: WorkflowTemplateCreate) -> WorkflowTemplate:
        row = WorkflowTemplateModel(
            name=data.name,
            description=data.description,
            category=_enum_value(data.category),
            trigger=_enum_value(data.trigger),
            conditions=to_jsonable_python(list(data.conditions or [])),
            actions=_require_actions(data.actions),
            is_public=data.is_public,
            created_by=data.created_by,
        )
        return _template_to_entity(await self.create(row))

    async def get_template(self, template_id: str) -> WorkflowTemplate | None:
        row = await self.get_by_id(template_id)
        return _template_to_entity(row) if row else None

    async def list_templates(self, *, public_only: bool = True) -> list[WorkflowTemplate]:
        q = select(WorkflowTemplateModel)
        if public_only:
            q = q.where(WorkflowTemplateModel.is_public.is_(True))
        q = q.order_by(WorkflowTemplateModel.category.asc(), WorkflowTemplateModel.name.asc())
        result = await self.db.execute(q)
        return [_template_to_entity(r) for r in result.scalars().all()]
