"""Typed parameters for workflow actions.

One pydantic model per action type. The same models validate actions when
a rule is saved (API layer) and parse them again right before execution,
so a rule stored before a schema change still fails with a clear message.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.core.constants import WEBHOOK_DEFAULT_METHOD
from app.domain.exceptions import ActionParameterException, UnknownActionTypeException
from app.shared.enums import TaskPriority, WorkflowActionType

_WEBHOOK_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


class ActionParams(BaseModel):
    """Base for action params; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class ClientScopedParams(ActionParams):
    """Params for actions that target a client (falls back to payload client_id)."""

    client_id: str | None = None


class SendEmailParams(ClientScopedParams):
    to: str | None = None
    subject: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    template_id: str | None = None


class SendSmsParams(ClientScopedParams):
    to: str | None = None
    message: str = Field(..., min_length=1)


class CreateTaskParams(ClientScopedParams):
    title: str = Field(..., min_length=1)
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def coerce_priority(cls, v: Any) -> Any:
        """Unknown or missing priority becomes medium instead of failing the action."""
        if isinstance(v, TaskPriority):
            return v
        if isinstance(v, str) and v.lower() in TaskPriority.values():
            return v.lower()
        return TaskPriority.MEDIUM


class AssignSegmentParams(ClientScopedParams):
    segment_id: str = Field(..., min_length=1)


class TagParams(ClientScopedParams):
    """Shared by add_tag and remove_tag."""

    tag_id: str = Field(..., min_length=1)


class CreateNoteParams(ClientScopedParams):
    content: str = Field(..., min_length=1)
    type: str = "general"
    priority: str = "medium"


class UpdateFieldParams(ClientScopedParams):
    field: str = Field(..., min_length=1, max_length=128)
    value: Any = None


class AssignUserParams(ClientScopedParams):
    user_id: str = Field(..., min_length=1)


class WebhookParams(ActionParams):
    url: str = Field(..., min_length=1)
    method: str = WEBHOOK_DEFAULT_METHOD
    headers: dict[str, str] = Field(default_factory=dict)
    body: dict[str, Any] | list[Any] | None = None

    @field_validator("url")
    @classmethod
    def url_scheme(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> str:
        method = str(v or WEBHOOK_DEFAULT_METHOD).strip().upper()
        if method not in _WEBHOOK_METHODS:
            raise ValueError(f"method must be one of {sorted(_WEBHOOK_METHODS)}")
        return method


class DelayParams(ActionParams):
    seconds: float | None = Field(default=None, ge=0)


ACTION_PARAMS_MODELS: dict[WorkflowActionType, type[ActionParams]] = {
    WorkflowActionType.SEND_EMAIL: SendEmailParams,
    WorkflowActionType.SEND_SMS: SendSmsParams,
    WorkflowActionType.CREATE_TASK: CreateTaskParams,
    WorkflowActionType.ASSIGN_SEGMENT: AssignSegmentParams,
    WorkflowActionType.ADD_TAG: TagParams,
    WorkflowActionType.REMOVE_TAG: TagParams,
    WorkflowActionType.CREATE_NOTE: CreateNoteParams,
    WorkflowActionType.UPDATE_FIELD: UpdateFieldParams,
    WorkflowActionType.ASSIGN_USER: AssignUserParams,
    WorkflowActionType.WEBHOOK: WebhookParams,
    WorkflowActionType.DELAY: DelayParams,
}


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "params"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def resolve_action_type(action_type: str | WorkflowActionType) -> WorkflowActionType:
    """Map a stored type string to the enum; UnknownActionTypeException otherwise."""
    try:
        return WorkflowActionType(action_type)
    except ValueError:
        raise UnknownActionTypeException(str(action_type)) from None


def parse_action_params(
    action_type: str | WorkflowActionType, params: dict[str, Any] | None
) -> ActionParams:
    """Validate raw params for an action type.

    Raises:
        UnknownActionTypeException: type is not a known action.
        ActionParameterException: params fail validation.
    """
    kind = resolve_action_type(action_type)
    model = ACTION_PARAMS_MODELS[kind]
    try:
        return model.model_validate(params or {})
    except ValidationError as e:
        raise ActionParameterException(
            kind.value, f"Invalid params for {kind.value}: {_format_validation_error(e)}"
        ) from e
