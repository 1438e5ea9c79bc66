"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from app.shared.enums import WorkflowTrigger

if TYPE_CHECKING:
    from app.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
    from app.application.dtos.communication import CommunicationCreate, CommunicationResult
    from app.application.dtos.crm import ClientResult, NoteResult
    from app.application.dtos.task import TaskResult
    from app.application.dtos.workflow import (
        WorkflowExecutionCreate,
        WorkflowRuleCreate,
        WorkflowTemplateCreate,
    )
    from app.domain.entities.workflow import WorkflowExecution, WorkflowRule, WorkflowTemplate


# Rule store interface
class IWorkflowRuleRepository(Protocol):
    """Protocol for workflow rule storage."""

    async def create_rule(self, data: WorkflowRuleCreate) -> WorkflowRule:
        """Persist a new rule; return it with id and timestamps."""

    async def get_rule(self, rule_id: str) -> WorkflowRule | None:
        """Return rule by id or None."""

    async def list_rules(self, *, enabled_only: bool = False) -> list[WorkflowRule]:
        """Return rules ordered by priority desc, then creation order."""

    async def get_by_trigger(self, trigger: WorkflowTrigger) -> list[WorkflowRule]:
        """Return enabled rules for trigger, highest priority first."""

    async def update_rule(self, rule_id: str, changes: Mapping[str, Any]) -> WorkflowRule:
        """Apply partial changes. Raises ResourceNotFoundException if missing."""

    async def delete_rule(self, rule_id: str) -> None:
        """Hard delete. Raises ResourceNotFoundException if missing."""

    async def toggle_rule(self, rule_id: str, enabled: bool) -> WorkflowRule:
        """Set enabled flag only. Raises ResourceNotFoundException if missing."""


# Execution recorder interface
class IWorkflowExecutionRepository(Protocol):
    """Protocol for workflow execution records."""

    async def create_execution(self, data: WorkflowExecutionCreate) -> WorkflowExecution:
        """Persist the initial record of one rule evaluation."""

    async def update_execution(
        self, execution_id: str, changes: Mapping[str, Any]
    ) -> WorkflowExecution:
        """Partial update. Raises ExecutionStateException when the record is terminal."""

    async def get_execution(self, execution_id: str) -> WorkflowExecution | None:
        """Return execution by id or None."""

    async def list_executions(
        self, workflow_id: str | None = None, limit: int = 100
    ) -> list[WorkflowExecution]:
        """Return executions newest first, optionally for one rule."""


# Template store interface
class IWorkflowTemplateRepository(Protocol):
    """Protocol for reusable workflow templates."""

    async def create_template(self, data: WorkflowTemplateCreate) -> WorkflowTemplate:
        """Persist a template."""

    async def get_template(self, template_id: str) -> WorkflowTemplate | None:
        """Return template by id or None."""

    async def list_templates(self, *, public_only: bool = True) -> list[WorkflowTemplate]:
        """Return templates ordered by category then name."""


# Task repository interface (workflow create_task action)
class ITaskRepository(Protocol):
    """Protocol for task repository (workflow-created tasks)."""

    async def create_task(
        self,
        title: str,
        *,
        client_id: str | None = None,
        description: str | None = None,
        task_type: str = "follow_up",
        priority: str = "medium",
        status: str = "todo",
        due_date: datetime | None = None,
        created_by: str | None = None,
    ) -> TaskResult:
        """Create a task; return created result."""


# CRM mutation repository interface (tag/segment/field/user/note actions)
class ICrmMutationRepository(Protocol):
    """Protocol for client record mutations. Missing client raises ResourceNotFoundException."""

    async def add_tag(self, client_id: str, tag_id: str) -> ClientResult:
        """Add tag if not present (idempotent)."""

    async def remove_tag(self, client_id: str, tag_id: str) -> ClientResult:
        """Remove tag if present (idempotent)."""

    async def assign_segment(self, client_id: str, segment_id: str) -> ClientResult:
        """Add client to segment (idempotent)."""

    async def update_field(self, client_id: str, field: str, value: Any) -> ClientResult:
        """Set a core column or, for any other name, a custom field."""

    async def assign_user(self, client_id: str, user_id: str) -> ClientResult:
        """Set the owning user."""

    async def create_note(
        self,
        client_id: str,
        content: str,
        *,
        note_type: str = "general",
        priority: str = "normal",
        created_by: str | None = None,
    ) -> NoteResult:
        """Append a note to the client."""


# Communication record repository interface
class ICommunicationRepository(Protocol):
    """Protocol for outbound communication records."""

    async def create(self, data: CommunicationCreate) -> CommunicationResult:
        """Persist one communication record."""


# Audit log repository interface (append-only)
class IAuditLogRepository(Protocol):
    """Protocol for audit log repository (DIP). Append-only."""

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit log entry; return created record."""

    async def list(
        self,
        *,
        entity_type: str | None = None,
        entity_id: str | None = None,
        limit: int = 100,
    ) -> list[AuditLogResult]:
        """List audit log entries newest first."""
