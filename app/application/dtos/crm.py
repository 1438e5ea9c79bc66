"""DTOs for CRM client mutations performed by workflow actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ClientResult:
    """Client read-model returned after a tag/segment/field/user mutation."""

    id: str
    first_name: str
    last_name: str
    email: str | None
    phone_number: str | None
    status: str
    tags: list[str] = field(default_factory=list)
    segment_ids: list[str] = field(default_factory=list)
    assigned_user_id: str | None = None
    custom_fields: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class NoteResult:
    """Client note created by the create_note action."""

    id: str
    client_id: str
    content: str
    note_type: str
    priority: str
    created_by: str | None
    created_at: datetime
