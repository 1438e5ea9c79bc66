"""Task repository for workflow create_task action."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.task import TaskResult
from app.infrastructure.persistence.models.task import Task
from app.shared.utils.datetime import ensure_utc


def _to_result(t: Task) -> TaskResult:
    """Map Task ORM to TaskResult DTO."""
    return TaskResult(
        id=t.id,
        client_id=t.client_id,
        title=t.title,
        description=t.description,
        task_type=t.task_type,
        priority=t.priority,
        status=t.status,
        due_date=ensure_utc(t.due_date),
        created_by=t.created_by,
        created_at=ensure_utc(t.created_at),  # type: ignore[arg-type]
    )


class TaskRepository:
    """Task repository. Implements ITaskRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_task(
        self,
        title: str,
        *,
        client_id: str | None = None,
        description: str | None = None,
        task_type: str = "follow_up",
        priority: str = "medium",
        status: str = "todo",
        due_date: datetime | None = None,
        created_by: str | None = None,
    ) -> TaskResult:
        """Create a task and return the result DTO."""
        task = Task(
            client_id=client_id,
            title=title,
            description=description,
            task_type=task_type,
            priority=priority,
            status=status,
            due_date=due_date,
            created_by=created_by,
        )
        self.db.add(task)
        await self.db.flush()
        await self.db.refresh(task)
        return _to_result(task)
