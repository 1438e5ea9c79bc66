"""DTOs for workflow-created tasks (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TaskResult:
    """Task created by workflow create_task action."""

    id: str
    client_id: str | None
    title: str
    description: str | None
    task_type: str
    priority: str
    status: str
    due_date: datetime | None
    created_by: str | None
    created_at: datetime
