"""Workflow use cases: action dispatch, action execution, trigger processing, templates."""

from app.application.use_cases.workflows.action_executor import WorkflowActionExecutor
from app.application.use_cases.workflows.action_handlers import WorkflowActionHandlers
from app.application.use_cases.workflows.template_instantiation import WorkflowTemplateService
from app.application.use_cases.workflows.trigger_processor import WorkflowTriggerProcessor

__all__ = [
    "WorkflowActionExecutor",
    "WorkflowActionHandlers",
    "WorkflowTemplateService",
    "WorkflowTriggerProcessor",
]
