"""DTOs for outbound communications (email/SMS)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DeliveryReceipt:
    """What a delivery provider reports back for one accepted message."""

    provider_message_id: str
    status: str = "sent"


@dataclass(frozen=True)
class CommunicationCreate:
    """Input for persisting one outbound communication record."""

    client_id: str | None
    channel: str
    recipient: str
    sender: str
    body: str
    status: str
    subject: str | None = None
    template_id: str | None = None
    provider_message_id: str | None = None
    created_by: str | None = None
    sent_at: datetime | None = None


@dataclass(frozen=True)
class CommunicationResult:
    """Persisted communication (read-model)."""

    id: str
    client_id: str | None
    channel: str
    recipient: str
    sender: str
    subject: str | None
    body: str
    template_id: str | None
    status: str
    provider_message_id: str | None
    created_by: str | None
    sent_at: datetime | None
    created_at: datetime
