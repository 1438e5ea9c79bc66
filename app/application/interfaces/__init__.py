"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IAuditLogRepository,
    ICommunicationRepository,
    ICrmMutationRepository,
    ITaskRepository,
    IWorkflowExecutionRepository,
    IWorkflowRuleRepository,
    IWorkflowTemplateRepository,
)
from app.application.interfaces.services import (
    IAuditService,
    ICacheService,
    ICommunicationService,
    IDeliveryProvider,
    IErrorReporter,
    IWebhookClient,
    IWorkflowTriggerProcessor,
)

__all__ = [
    "IAuditLogRepository",
    "IAuditService",
    "ICacheService",
    "ICommunicationRepository",
    "ICommunicationService",
    "ICrmMutationRepository",
    "IDeliveryProvider",
    "IErrorReporter",
    "ITaskRepository",
    "IWebhookClient",
    "IWorkflowExecutionRepository",
    "IWorkflowRuleRepository",
    "IWorkflowTemplateRepository",
    "IWorkflowTriggerProcessor",
]
