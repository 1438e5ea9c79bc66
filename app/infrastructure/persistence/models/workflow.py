"""Workflow rule, execution and template ORM models."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AuditedModel, CuidMixin
from app.shared.enums import WorkflowExecutionStatus, WorkflowTemplateCategory
from app.shared.utils.datetime import utc_now


def _in_check(column: str, values: list[str]) -> str:
    return "{} IN ({})".format(
        column, ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    )


class WorkflowRule(AuditedModel, Base):
    """Workflow rule definition. Table: workflow_rule. Conditions + actions JSON."""

    __tablename__ = "workflow_rule"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    trigger: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    trigger_config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    conditions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    actions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.true()
    )
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )

    __table_args__ = (
        Index("ix_workflow_rule_trigger_enabled_priority", "trigger", "enabled", "priority"),
    )


class WorkflowExecution(CuidMixin, Base):
    """One rule evaluation for one trigger firing. Table: workflow_execution."""

    __tablename__ = "workflow_execution"

    # Plain column, no foreign key: execution history outlives its rule.
    workflow_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    workflow_name: Mapped[str] = mapped_column(String(255), nullable=False)
    trigger: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    trigger_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    conditions_met: Mapped[bool] = mapped_column(Boolean, nullable=False)
    actions_executed: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=WorkflowExecutionStatus.PENDING.value,
        index=True,
    )
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("ix_workflow_execution_workflow_started", "workflow_id", "started_at"),
        CheckConstraint(
            _in_check("status", WorkflowExecutionStatus.values()),
            name="workflow_execution_status_check",
        ),
    )


class WorkflowTemplate(CuidMixin, Base):
    """Reusable workflow blueprint. Table: workflow_template."""

    __tablename__ = "workflow_template"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    trigger: Mapped[str] = mapped_column(String(64), nullable=False)
    conditions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    actions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.true()
    )
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, server_default=sa.func.now()
    )

    __table_args__ = (
        CheckConstraint(
            _in_check("category", WorkflowTemplateCategory.values()),
            name="workflow_template_category_check",
        ),
    )
