"""Pydantic request/response schemas for the API."""

from app.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from app.schemas.workflow import (
    TemplateInstantiateRequest,
    TriggerFireResponse,
    WorkflowActionSchema,
    WorkflowConditionSchema,
    WorkflowCreateRequest,
    WorkflowExecutionResponse,
    WorkflowResponse,
    WorkflowTemplateCreateRequest,
    WorkflowTemplateResponse,
    WorkflowToggleRequest,
    WorkflowUpdateRequest,
)

__all__ = [
    "HealthResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "TemplateInstantiateRequest",
    "TriggerFireResponse",
    "WorkflowActionSchema",
    "WorkflowConditionSchema",
    "WorkflowCreateRequest",
    "WorkflowExecutionResponse",
    "WorkflowResponse",
    "WorkflowTemplateCreateRequest",
    "WorkflowTemplateResponse",
    "WorkflowToggleRequest",
    "WorkflowUpdateRequest",
]
