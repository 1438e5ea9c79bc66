"""CRM client and client note ORM models (targets of workflow mutations)."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AuditedModel


class Client(AuditedModel, Base):
    """CRM client. Table: client. Tags and segment ids are JSON lists of ids."""

    __tablename__ = "client"

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="active", server_default="active"
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    segment_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    assigned_user_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    custom_fields: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)


class ClientNote(AuditedModel, Base):
    """Note attached to a client. Table: client_note."""

    __tablename__ = "client_note"

    client_id: Mapped[str] = mapped_column(
        String, ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    note_type: Mapped[str] = mapped_column(
        String(32), nullable=False, default="general", server_default="general"
    )
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default="medium", server_default="medium"
    )
