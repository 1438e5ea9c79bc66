"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from app.infrastructure.persistence.repositories.auditable_repo import AuditableRepository
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.client_repo import ClientRepository
from app.infrastructure.persistence.repositories.communication_repo import (
    CommunicationRepository,
)
from app.infrastructure.persistence.repositories.task_repo import TaskRepository
from app.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowExecutionRepository,
    WorkflowRuleRepository,
    WorkflowTemplateRepository,
)

__all__ = [
    "AuditLogRepository",
    "AuditableRepository",
    "BaseRepository",
    "ClientRepository",
    "CommunicationRepository",
    "TaskRepository",
    "WorkflowExecutionRepository",
    "WorkflowRuleRepository",
    "WorkflowTemplateRepository",
]
