"""DTOs for the audit log (rule management trail)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditLogEntryCreate:
    """Input for appending one audit log record. Append-only; no update."""

    actor_id: str | None
    actor_type: str
    action: str
    entity_type: str
    entity_id: str
    entity_data: dict[str, Any]
    metadata: dict[str, Any] | None
    request_id: str | None


@dataclass(frozen=True)
class AuditLogResult:
    """Single audit log entry (read-model for list/get)."""

    id: str
    actor_id: str | None
    actor_type: str
    action: str
    entity_type: str
    entity_id: str
    entity_data: dict[str, Any]
    metadata: dict[str, Any] | None
    request_id: str | None
    timestamp: datetime
