"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repos, delivery, webhooks, audit).
"""

from app.application.interfaces import (
    IAuditService,
    ICacheService,
    ICommunicationService,
    ICrmMutationRepository,
    IErrorReporter,
    ITaskRepository,
    IWebhookClient,
    IWorkflowExecutionRepository,
    IWorkflowRuleRepository,
    IWorkflowTemplateRepository,
    IWorkflowTriggerProcessor,
)
from app.application.services import evaluate_conditions, replace_variables
from app.application.use_cases.workflows import (
    WorkflowActionExecutor,
    WorkflowActionHandlers,
    WorkflowTemplateService,
    WorkflowTriggerProcessor,
)

__all__ = [
    "IAuditService",
    "ICacheService",
    "ICommunicationService",
    "ICrmMutationRepository",
    "IErrorReporter",
    "ITaskRepository",
    "IWebhookClient",
    "IWorkflowExecutionRepository",
    "IWorkflowRuleRepository",
    "IWorkflowTemplateRepository",
    "IWorkflowTriggerProcessor",
    "WorkflowActionExecutor",
    "WorkflowActionHandlers",
    "WorkflowTemplateService",
    "WorkflowTriggerProcessor",
    "evaluate_conditions",
    "replace_variables",
]
