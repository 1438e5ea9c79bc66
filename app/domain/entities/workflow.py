"""Workflow domain entities.

A workflow rule is a definition: a trigger, AND-ed conditions over the
trigger payload, and an ordered list of actions. An execution is the
record of one rule's evaluation for one trigger firing.

Action configs and action executions round-trip through JSON columns, so
they carry to_dict/from_dict helpers.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.shared.enums import (
    WorkflowExecutionStatus,
    WorkflowTemplateCategory,
    WorkflowTrigger,
)
from app.shared.utils.datetime import ensure_utc


def _parse_dt(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(str(value)))


@dataclass(frozen=True)
class WorkflowCondition:
    """Predicate over a dot-path field of the trigger payload."""

    field: str
    operator: str
    value: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WorkflowCondition:
        return cls(
            field=str(data.get("field", "")),
            operator=str(data.get("operator", "")),
            value=data.get("value"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "operator": self.operator, "value": self.value}


@dataclass(frozen=True)
class WorkflowActionConfig:
    """One configured action: type, type-specific params, optional delay in seconds."""

    type: str
    params: dict[str, Any] = field(default_factory=dict)
    delay: float | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WorkflowActionConfig:
        delay = data.get("delay")
        return cls(
            type=str(data.get("type", "")),
            params=dict(data.get("params") or {}),
            delay=float(delay) if delay is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "params": dict(self.params)}
        if self.delay is not None:
            data["delay"] = self.delay
        return data

    @property
    def delay_seconds(self) -> float:
        """Configured delay, 0 when unset or not positive."""
        return self.delay if self.delay is not None and self.delay > 0 else 0.0


@dataclass
class WorkflowRule:
    """Stored automation definition (trigger + conditions + actions)."""

    id: str
    name: str
    trigger: WorkflowTrigger
    actions: list[WorkflowActionConfig]
    conditions: list[WorkflowCondition] = field(default_factory=list)
    description: str | None = None
    trigger_config: dict[str, Any] = field(default_factory=dict)
    enabled: bool = True
    priority: int = 0
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_usable(self) -> bool:
        """A rule with no actions can never do anything."""
        return bool(self.actions)

    def can_trigger_on(self, trigger: WorkflowTrigger) -> bool:
        """Return whether this rule is enabled and listens to the trigger."""
        return self.enabled and self.trigger == trigger


@dataclass
class WorkflowActionExecution:
    """Outcome of running one action of a matched rule."""

    action_type: str
    action_config: dict[str, Any]
    status: WorkflowExecutionStatus = WorkflowExecutionStatus.PENDING
    result: Any = None
    error: str | None = None
    executed_at: datetime | None = None
    duration: int | None = None

    def mark_running(self, at: datetime) -> None:
        self.status = WorkflowExecutionStatus.RUNNING
        self.executed_at = at

    def mark_completed(self, result: Any, duration_ms: int) -> None:
        self.status = WorkflowExecutionStatus.COMPLETED
        self.result = result
        self.duration = duration_ms

    def mark_failed(self, error: str, duration_ms: int) -> None:
        self.status = WorkflowExecutionStatus.FAILED
        self.error = error
        self.duration = duration_ms

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_type": self.action_type,
            "action_config": self.action_config,
            "status": self.status.value,
            "result": self.result,
            "error": self.error,
            "executed_at": self.executed_at.isoformat() if self.executed_at else None,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WorkflowActionExecution:
        return cls(
            action_type=str(data.get("action_type", "")),
            action_config=dict(data.get("action_config") or {}),
            status=WorkflowExecutionStatus(data.get("status", "pending")),
            result=data.get("result"),
            error=data.get("error"),
            executed_at=_parse_dt(data.get("executed_at")),
            duration=data.get("duration"),
        )


@dataclass
class WorkflowExecution:
    """Persisted record of one rule evaluation for one trigger firing."""

    id: str
    workflow_id: str
    workflow_name: str
    trigger: str
    trigger_data: dict[str, Any]
    conditions_met: bool
    status: WorkflowExecutionStatus
    started_at: datetime
    actions_executed: list[WorkflowActionExecution] = field(default_factory=list)
    error: str | None = None
    completed_at: datetime | None = None
    duration: int | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in WorkflowExecutionStatus.terminal()

    @property
    def failed_action_count(self) -> int:
        return sum(
            1 for a in self.actions_executed if a.status == WorkflowExecutionStatus.FAILED
        )


@dataclass(frozen=True)
class WorkflowTemplate:
    """Reusable blueprint that can be instantiated into a rule."""

    id: str
    name: str
    description: str
    category: WorkflowTemplateCategory
    trigger: WorkflowTrigger
    actions: list[WorkflowActionConfig]
    conditions: list[WorkflowCondition] = field(default_factory=list)
    is_public: bool = True
    created_by: str | None = None
    created_at: datetime | None = None
