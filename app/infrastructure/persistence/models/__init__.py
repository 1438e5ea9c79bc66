"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.audit_log import AuditLog
from app.infrastructure.persistence.models.client import Client, ClientNote
from app.infrastructure.persistence.models.communication import Communication
from app.infrastructure.persistence.models.mixins import (
    AuditedModel,
    CreatedByMixin,
    CuidMixin,
    TimestampMixin,
)
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.models.workflow import (
    WorkflowExecution,
    WorkflowRule,
    WorkflowTemplate,
)

__all__ = [
    "AuditLog",
    "Client",
    "ClientNote",
    "Communication",
    "Task",
    "WorkflowRule",
    "WorkflowExecution",
    "WorkflowTemplate",
    "CuidMixin",
    "TimestampMixin",
    "CreatedByMixin",
    "AuditedModel",
]
