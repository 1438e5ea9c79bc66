"""Client repository: CRM mutations performed by workflow actions."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.crm import ClientResult, NoteResult
from app.domain.exceptions import ValidationException
from app.infrastructure.persistence.models.client import Client, ClientNote
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc

logger = get_logger(__name__)

# Columns update_field may write directly; any other name lands in custom_fields.
_CORE_FIELDS = frozenset({"first_name", "last_name", "email", "phone_number", "status"})
# Managed by dedicated actions or by the database.
_PROTECTED_FIELDS = frozenset(
    {"id", "tags", "segment_ids", "assigned_user_id", "custom_fields", "created_at", "updated_at", "created_by"}
)
_CUSTOM_PREFIX = "custom_fields."


def _to_result(c: Client) -> ClientResult:
    return ClientResult(
        id=c.id,
        first_name=c.first_name,
        last_name=c.last_name,
        email=c.email,
        phone_number=c.phone_number,
        status=c.status,
        tags=list(c.tags or []),
        segment_ids=list(c.segment_ids or []),
        assigned_user_id=c.assigned_user_id,
        custom_fields=dict(c.custom_fields or {}),
        created_at=ensure_utc(c.created_at),
        updated_at=ensure_utc(c.updated_at),
    )


def _note_to_result(n: ClientNote) -> NoteResult:
    return NoteResult(
        id=n.id,
        client_id=n.client_id,
        content=n.content,
        note_type=n.note_type,
        priority=n.priority,
        created_by=n.created_by,
        created_at=ensure_utc(n.created_at),  # type: ignore[arg-type]
    )


class ClientRepository(BaseRepository[Client]):
    """Client repository. Implements ICrmMutationRepository.

    List columns are replaced, not mutated in place, so the ORM sees the change.
    """

    resource_type = "client"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Client)

    async def get_client(self, client_id: str) -> ClientResult | None:
        client = await self.get_by_id(client_id)
        return _to_result(client) if client else None

    async def add_tag(self, client_id: str, tag_id: str) -> ClientResult:
        client = await self.get_or_raise(client_id)
        tags = list(client.tags or [])
        if tag_id not in tags:
            client.tags = [*tags, tag_id]
            client = await self.update(client)
        return _to_result(client)

    async def remove_tag(self, client_id: str, tag_id: str) -> ClientResult:
        client = await self.get_or_raise(client_id)
        tags = list(client.tags or [])
        if tag_id in tags:
            client.tags = [t for t in tags if t != tag_id]
            client = await self.update(client)
        return _to_result(client)

    async def assign_segment(self, client_id: str, segment_id: str) -> ClientResult:
        client = await self.get_or_raise(client_id)
        segments = list(client.segment_ids or [])
        if segment_id not in segments:
            client.segment_ids = [*segments, segment_id]
            client = await self.update(client)
        return _to_result(client)

    async def update_field(self, client_id: str, field: str, value: Any) -> ClientResult:
        """Set a core column, or a custom field for any other (or custom_fields.*) name.

        Raises:
            ResourceNotFoundException: client does not exist.
            ValidationException: field is managed elsewhere or a required column would be blanked.
        """
        if field in _PROTECTED_FIELDS:
            raise ValidationException(f"Field {field!r} cannot be set with update_field", field=field)
        client = await self.get_or_raise(client_id)
        if field in _CORE_FIELDS:
            if field in ("first_name", "status") and not value:
                raise ValidationException(f"Field {field!r} cannot be empty", field=field)
            setattr(client, field, None if value is None else str(value))
        else:
            key = field.removeprefix(_CUSTOM_PREFIX)
            if not key:
                raise ValidationException("Custom field name is empty", field=field)
            client.custom_fields = {**(client.custom_fields or {}), key: value}
        client = await self.update(client)
        logger.debug("Client %s field %s updated by workflow", client_id, field)
        return _to_result(client)

    async def assign_user(self, client_id: str, user_id: str) -> ClientResult:
        client = await self.get_or_raise(client_id)
        client.assigned_user_id = user_id
        return _to_result(await self.update(client))

    async def create_note(
        self,
        client_id: str,
        content: str,
        *,
        note_type: str = "general",
        priority: str = "medium",
        created_by: str | None = None,
    ) -> NoteResult:
        await self.get_or_raise(client_id)
        note = ClientNote(
            client_id=client_id,
            content=content,
            note_type=note_type,
            priority=priority,
            created_by=created_by,
        )
        self.db.add(note)
        await self.db.flush()
        await self.db.refresh(note)
        return _note_to_result(note)
