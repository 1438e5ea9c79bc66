"""Domain layer: entities and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    WorkflowActionConfig,
    WorkflowActionExecution,
    WorkflowCondition,
    WorkflowExecution,
    WorkflowRule,
    WorkflowTemplate,
)
from app.domain.exceptions import (
    ActionParameterException,
    CrmAutomationException,
    ExecutionStateException,
    ResourceNotFoundException,
    UnknownActionTypeException,
    ValidationException,
    WebhookDeliveryException,
    WorkflowActionException,
)

__all__ = [
    "ActionParameterException",
    "CrmAutomationException",
    "ExecutionStateException",
    "ResourceNotFoundException",
    "UnknownActionTypeException",
    "ValidationException",
    "WebhookDeliveryException",
    "WorkflowActionConfig",
    "WorkflowActionExecution",
    "WorkflowActionException",
    "WorkflowCondition",
    "WorkflowExecution",
    "WorkflowRule",
    "WorkflowTemplate",
]
