"""DTOs for workflow rule, execution and template persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.shared.enums import WorkflowExecutionStatus, WorkflowTemplateCategory, WorkflowTrigger

# Fields a rule update may change; id and created_at are fixed at creation.
RULE_UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "trigger",
        "trigger_config",
        "conditions",
        "actions",
        "enabled",
        "priority",
    }
)

EXECUTION_UPDATABLE_FIELDS = frozenset(
    {
        "status",
        "conditions_met",
        "actions_executed",
        "error",
        "completed_at",
        "duration",
    }
)


@dataclass(frozen=True)
class WorkflowRuleCreate:
    """Input for creating a rule. Actions and conditions are plain dicts (JSON columns)."""

    name: str
    trigger: WorkflowTrigger
    actions: list[dict[str, Any]]
    conditions: list[dict[str, Any]] = field(default_factory=list)
    description: str | None = None
    trigger_config: dict[str, Any] = field(default_factory=dict)
    enabled: bool = True
    priority: int = 0
    created_by: str | None = None


@dataclass(frozen=True)
class WorkflowExecutionCreate:
    """Input for the initial execution record of one rule evaluation."""

    workflow_id: str
    workflow_name: str
    trigger: str
    trigger_data: dict[str, Any]
    conditions_met: bool
    status: WorkflowExecutionStatus
    started_at: datetime
    actions_executed: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None
    completed_at: datetime | None = None
    duration: int | None = None


@dataclass(frozen=True)
class WorkflowTemplateCreate:
    """Input for storing a reusable rule blueprint."""

    name: str
    description: str
    category: WorkflowTemplateCategory
    trigger: WorkflowTrigger
    actions: list[dict[str, Any]]
    conditions: list[dict[str, Any]] = field(default_factory=list)
    is_public: bool = True
    created_by: str | None = None
