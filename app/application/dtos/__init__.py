"""Application DTOs (no ORM dependency)."""

from app.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
from app.application.dtos.communication import (
    CommunicationCreate,
    CommunicationResult,
    DeliveryReceipt,
)
from app.application.dtos.crm import ClientResult, NoteResult
from app.application.dtos.task import TaskResult
from app.application.dtos.workflow import (
    WorkflowExecutionCreate,
    WorkflowRuleCreate,
    WorkflowTemplateCreate,
)

__all__ = [
    "AuditLogEntryCreate",
    "AuditLogResult",
    "ClientResult",
    "CommunicationCreate",
    "CommunicationResult",
    "DeliveryReceipt",
    "NoteResult",
    "TaskResult",
    "WorkflowExecutionCreate",
    "WorkflowRuleCreate",
    "WorkflowTemplateCreate",
]
