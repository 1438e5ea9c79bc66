"""initial workflow engine schema

Revision ID: a1c3e5f7b9d0
Revises:
Create Date: 2026-10-18 09:12:44.508211

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a1c3e5f7b9d0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audited_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema - workflow rules/executions/templates plus CRM targets and audit log."""
    op.create_table(
        "client",
        *_audited_columns(),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="active"),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("segment_ids", sa.JSON(), nullable=False),
        sa.Column("assigned_user_id", sa.String(), nullable=True),
        sa.Column("custom_fields", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_client_email", "client", ["email"])
    op.create_index("ix_client_assigned_user_id", "client", ["assigned_user_id"])
    op.create_index("ix_client_created_at", "client", ["created_at"])
    op.create_index("ix_client_created_by", "client", ["created_by"])

    op.create_table(
        "client_note",
        *_audited_columns(),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("note_type", sa.String(32), nullable=False, server_default="general"),
        sa.Column("priority", sa.String(16), nullable=False, server_default="medium"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["client.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_client_note_client_id", "client_note", ["client_id"])
    op.create_index("ix_client_note_created_at", "client_note", ["created_at"])
    op.create_index("ix_client_note_created_by", "client_note", ["created_by"])

    op.create_table(
        "task",
        *_audited_columns(),
        sa.Column("client_id", sa.String(), nullable=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("task_type", sa.String(32), nullable=False, server_default="follow_up"),
        sa.Column("priority", sa.String(16), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(32), nullable=False, server_default="todo"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["client.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'urgent')", name="task_priority_check"
        ),
    )
    op.create_index("ix_task_client_id", "task", ["client_id"])
    op.create_index("ix_task_client_status", "task", ["client_id", "status"])
    op.create_index("ix_task_created_at", "task", ["created_at"])
    op.create_index("ix_task_created_by", "task", ["created_by"])

    op.create_table(
        "communication",
        *_audited_columns(),
        sa.Column("client_id", sa.String(), nullable=True),
        sa.Column("channel", sa.String(16), nullable=False),
        sa.Column("recipient", sa.String(320), nullable=False),
        sa.Column("sender", sa.String(320), nullable=False),
        sa.Column("subject", sa.String(998), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("template_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("provider_message_id", sa.String(), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["client.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_communication_client_id", "communication", ["client_id"])
    op.create_index(
        "ix_communication_client_channel", "communication", ["client_id", "channel"]
    )
    op.create_index("ix_communication_created_at", "communication", ["created_at"])
    op.create_index("ix_communication_created_by", "communication", ["created_by"])

    op.create_table(
        "workflow_rule",
        *_audited_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("trigger", sa.String(64), nullable=False),
        sa.Column("trigger_config", sa.JSON(), nullable=False),
        sa.Column("conditions", sa.JSON(), nullable=False),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("priority", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_rule_trigger", "workflow_rule", ["trigger"])
    op.create_index(
        "ix_workflow_rule_trigger_enabled_priority",
        "workflow_rule",
        ["trigger", "enabled", "priority"],
    )
    op.create_index("ix_workflow_rule_created_at", "workflow_rule", ["created_at"])
    op.create_index("ix_workflow_rule_created_by", "workflow_rule", ["created_by"])

    op.create_table(
        "workflow_execution",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.Column("workflow_name", sa.String(255), nullable=False),
        sa.Column("trigger", sa.String(64), nullable=False),
        sa.Column("trigger_data", sa.JSON(), nullable=False),
        sa.Column("conditions_met", sa.Boolean(), nullable=False),
        sa.Column("actions_executed", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('pending', 'running', 'completed', 'failed', 'skipped')",
            name="workflow_execution_status_check",
        ),
    )
    op.create_index("ix_workflow_execution_workflow_id", "workflow_execution", ["workflow_id"])
    op.create_index("ix_workflow_execution_trigger", "workflow_execution", ["trigger"])
    op.create_index("ix_workflow_execution_status", "workflow_execution", ["status"])
    op.create_index(
        "ix_workflow_execution_workflow_started",
        "workflow_execution",
        ["workflow_id", "started_at"],
    )

    op.create_table(
        "workflow_template",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("trigger", sa.String(64), nullable=False),
        sa.Column("conditions", sa.JSON(), nullable=False),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "category IN ('welcome', 'follow_up', 'retention', 'upsell', 'custom')",
            name="workflow_template_category_check",
        ),
    )
    op.create_index("ix_workflow_template_category", "workflow_template", ["category"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.Column("actor_type", sa.String(16), nullable=False),
        sa.Column("action", sa.String(32), nullable=False),
        sa.Column("entity_type", sa.String(64), nullable=False),
        sa.Column("entity_id", sa.String(), nullable=False),
        sa.Column("entity_data", postgresql.JSONB(), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("request_id", sa.String(), nullable=True),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_actor_id", "audit_log", ["actor_id"])
    op.create_index("ix_audit_log_entity_type", "audit_log", ["entity_type"])
    op.create_index("ix_audit_log_entity_id", "audit_log", ["entity_id"])
    op.create_index("ix_audit_log_timestamp", "audit_log", ["timestamp"])


def downgrade() -> None:
    """Downgrade schema - drop all workflow engine tables."""
    op.drop_table("audit_log")
    op.drop_table("workflow_template")
    op.drop_table("workflow_execution")
    op.drop_table("workflow_rule")
    op.drop_table("communication")
    op.drop_table("task")
    op.drop_table("client_note")
    op.drop_table("client")
