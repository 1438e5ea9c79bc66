"""Workflow API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.application.dtos.workflow_action import parse_action_params
from app.domain.exceptions import WorkflowActionException
from app.shared.enums import (
    ConditionOperator,
    WorkflowActionType,
    WorkflowExecutionStatus,
    WorkflowTemplateCategory,
    WorkflowTrigger,
)


class WorkflowConditionSchema(BaseModel):
    """Single condition on a trigger payload field (dot paths allowed)."""

    field: str = Field(..., min_length=1, max_length=255)
    operator: ConditionOperator
    value: Any = None


class WorkflowActionSchema(BaseModel):
    """Single workflow action; params are validated against the action type."""

    type: WorkflowActionType
    params: dict[str, Any] = Field(default_factory=dict)
    delay: float | None = Field(default=None, ge=0, description="Seconds to wait first")

    @model_validator(mode="after")
    def validate_params(self) -> WorkflowActionSchema:
        try:
            parse_action_params(self.type, self.params)
        except WorkflowActionException as e:
            raise ValueError(e.message) from e
        return self

    def to_config(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type.value, "params": self.params}
        if self.delay is not None:
            data["delay"] = self.delay
        return data


class WorkflowCreateRequest(BaseModel):
    """Request body for creating a workflow rule."""

    name: str = Field(..., min_length=1, max_length=255)
    trigger: WorkflowTrigger
    actions: list[WorkflowActionSchema] = Field(..., min_length=1)
    conditions: list[WorkflowConditionSchema] = Field(default_factory=list)
    description: str | None = None
    trigger_config: dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True
    priority: int = 0


class WorkflowUpdateRequest(BaseModel):
    """Request body for updating a workflow rule (partial; omitted fields unchanged)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    trigger: WorkflowTrigger | None = None
    trigger_config: dict[str, Any] | None = None
    conditions: list[WorkflowConditionSchema] | None = None
    actions: list[WorkflowActionSchema] | None = Field(default=None, min_length=1)
    enabled: bool | None = None
    priority: int | None = None

    def to_changes(self) -> dict[str, Any]:
        """Only the fields the client sent, in storage shape."""
        changes = self.model_dump(exclude_unset=True, exclude={"actions", "conditions"})
        if "actions" in self.model_fields_set and self.actions is not None:
            changes["actions"] = [a.to_config() for a in self.actions]
        if "conditions" in self.model_fields_set and self.conditions is not None:
            changes["conditions"] = [c.model_dump(mode="json") for c in self.conditions]
        return {k: v for k, v in changes.items() if v is not None or k == "description"}


class WorkflowToggleRequest(BaseModel):
    """Request body for enabling or disabling a workflow rule."""

    enabled: bool


class WorkflowConditionSchemaOut(BaseModel):
    """Stored condition (not re-validated on read)."""

    model_config = ConfigDict(from_attributes=True)

    field: str
    operator: str
    value: Any = None


class WorkflowActionSchemaOut(BaseModel):
    """Stored action (not re-validated on read)."""

    model_config = ConfigDict(from_attributes=True)

    type: str
    params: dict[str, Any]
    delay: float | None = None


class WorkflowResponse(BaseModel):
    """Workflow rule response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None
    trigger: WorkflowTrigger
    trigger_config: dict[str, Any]
    conditions: list[WorkflowConditionSchemaOut]
    actions: list[WorkflowActionSchemaOut]
    enabled: bool
    priority: int
    created_by: str | None
    created_at: datetime | None
    updated_at: datetime | None


class WorkflowActionExecutionResponse(BaseModel):
    """Outcome of one action within an execution."""

    model_config = ConfigDict(from_attributes=True)

    action_type: str
    action_config: dict[str, Any]
    status: WorkflowExecutionStatus
    result: Any = None
    error: str | None = None
    executed_at: datetime | None = None
    duration: int | None = None


class WorkflowExecutionResponse(BaseModel):
    """Workflow execution response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    workflow_id: str
    workflow_name: str
    trigger: str
    trigger_data: dict[str, Any]
    conditions_met: bool
    status: WorkflowExecutionStatus
    actions_executed: list[WorkflowActionExecutionResponse]
    error: str | None
    started_at: datetime
    completed_at: datetime | None
    duration: int | None


class TriggerFireResponse(BaseModel):
    """Result of firing a trigger: one execution per enabled rule evaluated."""

    trigger: WorkflowTrigger
    rules_evaluated: int
    rules_matched: int
    executions: list[WorkflowExecutionResponse]


class WorkflowTemplateCreateRequest(BaseModel):
    """Request body for storing a workflow template."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    category: WorkflowTemplateCategory = WorkflowTemplateCategory.CUSTOM
    trigger: WorkflowTrigger
    actions: list[WorkflowActionSchema] = Field(..., min_length=1)
    conditions: list[WorkflowConditionSchema] = Field(default_factory=list)
    is_public: bool = True


class WorkflowTemplateResponse(BaseModel):
    """Workflow template response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    category: WorkflowTemplateCategory
    trigger: WorkflowTrigger
    conditions: list[WorkflowConditionSchemaOut]
    actions: list[WorkflowActionSchemaOut]
    is_public: bool
    created_by: str | None
    created_at: datetime | None


class TemplateInstantiateRequest(BaseModel):
    """Request body for turning a template into a rule."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    enabled: bool = False
    priority: int = 0

