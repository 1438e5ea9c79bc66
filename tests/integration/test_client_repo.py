"""Client, task and communication repository integration tests."""

from datetime import UTC, datetime

import pytest

from app.application.dtos.communication import CommunicationCreate
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.infrastructure.persistence.models.client import Client
from app.infrastructure.persistence.repositories.client_repo import ClientRepository
from app.infrastructure.persistence.repositories.communication_repo import (
    CommunicationRepository,
)
from app.infrastructure.persistence.repositories.task_repo import TaskRepository


@pytest.fixture
async def client_id(db_session) -> str:
    row = Client(first_name="Ada", last_name="Lovelace", email="ada@example.com")
    db_session.add(row)
    await db_session.flush()
    return row.id


async def test_get_client(db_session, client_id) -> None:
    repo = ClientRepository(db_session)
    found = await repo.get_client(client_id)
    assert found is not None
    assert found.first_name == "Ada"
    assert found.status == "active"
    assert found.tags == []
    assert found.custom_fields == {}
    assert await repo.get_client("missing") is None


async def test_add_tag_is_idempotent(db_session, client_id) -> None:
    repo = ClientRepository(db_session)
    await repo.add_tag(client_id, "vip")
    result = await repo.add_tag(client_id, "vip")
    assert result.tags == ["vip"]

    result = await repo.add_tag(client_id, "newsletter")
    assert result.tags == ["vip", "newsletter"]


async def test_remove_tag(db_session, client_id) -> None:
    repo = ClientRepository(db_session)
    await repo.add_tag(client_id, "vip")
    await repo.add_tag(client_id, "lead")

    result = await repo.remove_tag(client_id, "lead")
    assert result.tags == ["vip"]

    result = await repo.remove_tag(client_id, "not-there")
    assert result.tags == ["vip"]


async def test_assign_segment_is_idempotent(db_session, client_id) -> None:
    repo = ClientRepository(db_session)
    await repo.assign_segment(client_id, "seg-1")
    result = await repo.assign_segment(client_id, "seg-1")
    assert result.segment_ids == ["seg-1"]


async def test_update_field_sets_core_column(db_session, client_id) -> None:
    repo = ClientRepository(db_session)
    result = await repo.update_field(client_id, "status", "inactive")
    assert result.status == "inactive"
    assert result.custom_fields == {}

    result = await repo.update_field(client_id, "phone_number", 5551234)
    assert result.phone_number == "5551234"


async def test_update_field_writes_custom_fields(db_session, client_id) -> None:
    repo = ClientRepository(db_session)
    await repo.update_field(client_id, "lifecycle_stage", "customer")
    result = await repo.update_field(client_id, "custom_fields.score", 42)
    assert result.custom_fields == {"lifecycle_stage": "customer", "score": 42}


@pytest.mark.parametrize("field", ["id", "tags", "segment_ids", "custom_fields", "created_at"])
async def test_update_field_rejects_protected_fields(db_session, client_id, field) -> None:
    repo = ClientRepository(db_session)
    with pytest.raises(ValidationException) as exc_info:
        await repo.update_field(client_id, field, "x")
    assert exc_info.value.details["field"] == field


async def test_update_field_rejects_blank_required_column(db_session, client_id) -> None:
    repo = ClientRepository(db_session)
    with pytest.raises(ValidationException):
        await repo.update_field(client_id, "first_name", "")


async def test_update_field_rejects_empty_custom_name(db_session, client_id) -> None:
    repo = ClientRepository(db_session)
    with pytest.raises(ValidationException):
        await repo.update_field(client_id, "custom_fields.", 1)


async def test_assign_user(db_session, client_id) -> None:
    repo = ClientRepository(db_session)
    result = await repo.assign_user(client_id, "user-7")
    assert result.assigned_user_id == "user-7"


async def test_mutations_on_missing_client_raise_not_found(db_session) -> None:
    repo = ClientRepository(db_session)
    with pytest.raises(ResourceNotFoundException):
        await repo.add_tag("missing", "vip")
    with pytest.raises(ResourceNotFoundException):
        await repo.update_field("missing", "status", "active")
    with pytest.raises(ResourceNotFoundException):
        await repo.create_note("missing", "hello")


async def test_create_note(db_session, client_id) -> None:
    repo = ClientRepository(db_session)
    note = await repo.create_note(
        client_id, "Called, left voicemail", note_type="call", priority="high", created_by="system"
    )
    assert note.id
    assert note.client_id == client_id
    assert note.note_type == "call"
    assert note.priority == "high"
    assert note.created_by == "system"
    assert note.created_at.tzinfo is not None


async def test_create_task(db_session, client_id) -> None:
    repo = TaskRepository(db_session)
    due = datetime(2026, 5, 1, 9, 0, tzinfo=UTC)
    task = await repo.create_task(
        "Follow up",
        client_id=client_id,
        description="Check in after onboarding",
        priority="high",
        due_date=due,
        created_by="system",
    )
    assert task.id
    assert task.title == "Follow up"
    assert task.task_type == "follow_up"
    assert task.status == "todo"
    assert task.priority == "high"
    assert task.due_date == due


async def test_communications_listed_newest_first(db_session, client_id) -> None:
    repo = CommunicationRepository(db_session)
    first = await repo.create(
        CommunicationCreate(
            client_id=client_id,
            channel="email",
            recipient="ada@example.com",
            sender="noreply@example.com",
            subject="Welcome",
            body="Hello Ada",
            status="sent",
            provider_message_id="msg-1",
        )
    )
    second = await repo.create(
        CommunicationCreate(
            client_id=client_id,
            channel="sms",
            recipient="+15550100",
            sender="CRM",
            body="See you soon",
            status="sent",
        )
    )
    assert first.subject == "Welcome"
    assert second.subject is None

    listed = await repo.list_for_client(client_id)
    assert [c.id for c in listed] == [second.id, first.id]
    assert await repo.list_for_client("someone-else") == []
