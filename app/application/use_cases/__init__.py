"""Application use cases: one entry point per workflow."""

from app.application.use_cases.workflows import (
    WorkflowActionExecutor,
    WorkflowActionHandlers,
    WorkflowTemplateService,
    WorkflowTriggerProcessor,
)

__all__ = [
    "WorkflowActionExecutor",
    "WorkflowActionHandlers",
    "WorkflowTemplateService",
    "WorkflowTriggerProcessor",
]
