"""Domain entities: workflow rules, executions and templates."""

from app.domain.entities.workflow import (
    WorkflowActionConfig,
    WorkflowActionExecution,
    WorkflowCondition,
    WorkflowExecution,
    WorkflowRule,
    WorkflowTemplate,
)

__all__ = [
    "WorkflowActionConfig",
    "WorkflowActionExecution",
    "WorkflowCondition",
    "WorkflowExecution",
    "WorkflowRule",
    "WorkflowTemplate",
]
