"""Task ORM model. Follow-up task, typically created by the create_task action."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AuditedModel
from app.shared.enums import TaskPriority


class Task(AuditedModel, Base):
    """CRM task. Table: task."""

    __tablename__ = "task"

    client_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("client.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    task_type: Mapped[str] = mapped_column(
        String(32), nullable=False, default="follow_up", server_default="follow_up"
    )
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default="medium", server_default="medium"
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="todo", server_default="todo"
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_task_client_status", "client_id", "status"),
        CheckConstraint(
            "priority IN ({})".format(", ".join(f"'{v}'" for v in TaskPriority.values())),
            name="task_priority_check",
        ),
    )
