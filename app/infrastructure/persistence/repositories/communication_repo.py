"""Communication repository: persisted log of outbound email/SMS."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.communication import CommunicationCreate, CommunicationResult
from app.infrastructure.persistence.models.communication import Communication
from app.shared.utils.datetime import ensure_utc


def _to_result(c: Communication) -> CommunicationResult:
    return CommunicationResult(
        id=c.id,
        client_id=c.client_id,
        channel=c.channel,
        recipient=c.recipient,
        sender=c.sender,
        subject=c.subject,
        body=c.body,
        template_id=c.template_id,
        status=c.status,
        provider_message_id=c.provider_message_id,
        created_by=c.created_by,
        sent_at=ensure_utc(c.sent_at),
        created_at=ensure_utc(c.created_at),  # type: ignore[arg-type]
    )


class CommunicationRepository:
    """Communication repository. Implements ICommunicationRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, data: CommunicationCreate) -> CommunicationResult:
        row = Communication(
            client_id=data.client_id,
            channel=data.channel,
            recipient=data.recipient,
            sender=data.sender,
            subject=data.subject,
            body=data.body,
            template_id=data.template_id,
            status=data.status,
            provider_message_id=data.provider_message_id,
            created_by=data.created_by,
            sent_at=data.sent_at,
        )
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        return _to_result(row)

    async def list_for_client(self, client_id: str, limit: int = 100) -> list[CommunicationResult]:
        """Newest first."""
        result = await self.db.execute(
            select(Communication)
            .where(Communication.client_id == client_id)
            .order_by(Communication.created_at.desc())
            .limit(limit)
        )
        return [_to_result(r) for r in result.scalars().all()]
