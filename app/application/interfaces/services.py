"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

from app.shared.enums import ActorType, AuditAction

if TYPE_CHECKING:
    from app.application.dtos.communication import CommunicationResult, DeliveryReceipt
    from app.domain.entities.workflow import WorkflowExecution
    from app.shared.enums import WorkflowTrigger


# Trigger processor interface
class IWorkflowTriggerProcessor(Protocol):
    """Protocol for firing a trigger through the rule engine."""

    async def process_workflow_trigger(
        self, trigger: WorkflowTrigger | str, payload: Mapping[str, Any]
    ) -> list[WorkflowExecution]:
        """Run all enabled rules for trigger; return one execution per rule."""


# Communication service interface (send_email / send_sms actions)
class ICommunicationService(Protocol):
    """Protocol for sending and recording outbound email/SMS."""

    async def send_email(
        self,
        client_id: str | None,
        to: str,
        subject: str,
        body: str,
        template_id: str | None = None,
    ) -> CommunicationResult:
        """Deliver an email and persist the communication record."""

    async def send_sms(self, client_id: str | None, to: str, message: str) -> CommunicationResult:
        """Deliver an SMS and persist the communication record."""


# Delivery provider interface (wire-level send behind ICommunicationService)
class IDeliveryProvider(Protocol):
    """Protocol for a concrete email/SMS transport."""

    async def deliver_email(
        self, sender: str, to: str, subject: str, body: str
    ) -> DeliveryReceipt:
        """Hand an email to the transport."""

    async def deliver_sms(self, sender: str, to: str, message: str) -> DeliveryReceipt:
        """Hand an SMS to the transport."""


# Webhook client interface
class IWebhookClient(Protocol):
    """Protocol for outbound webhook calls."""

    async def send(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: Any = None,
    ) -> dict[str, Any]:
        """Call url; return status and parsed body. Raises WebhookDeliveryException on non-2xx."""


# Audit service interface
class IAuditService(Protocol):
    """Protocol for emitting system audit events."""

    async def emit_audit_event(
        self,
        entity_type: str,
        action: AuditAction,
        entity_id: str,
        entity_data: dict[str, Any],
        actor_id: str | None = None,
        actor_type: ActorType | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Emit one audit event."""


# Error reporter interface
class IErrorReporter(Protocol):
    """Protocol for routing failures to whatever observes them (logs, tracker)."""

    def report(
        self,
        exc: BaseException,
        context: Mapping[str, Any] | None = None,
        *,
        severity: str = "error",
    ) -> None:
        """Record exc with context. Must never raise."""


# Cache service interface
class ICacheService(Protocol):
    """Minimal cache protocol for rule lookups (DIP)."""

    def is_available(self) -> bool:
        """Return True if cache is connected."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL. Returns True on success."""

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True on success."""
