"""Unit tests for WorkflowTemplateService.instantiate."""

from unittest.mock import AsyncMock

import pytest

from app.application.use_cases.workflows.template_instantiation import WorkflowTemplateService
from app.domain.entities.workflow import (
    WorkflowActionConfig,
    WorkflowCondition,
    WorkflowTemplate,
)
from app.domain.exceptions import ResourceNotFoundException
from app.shared.enums import WorkflowTemplateCategory, WorkflowTrigger


def _template() -> WorkflowTemplate:
    return WorkflowTemplate(
        id="tpl-1",
        name="Welcome series",
        description="Greets new clients",
        category=WorkflowTemplateCategory.WELCOME,
        trigger=WorkflowTrigger.CLIENT_CREATED,
        actions=[WorkflowActionConfig(type="send_email", params={"subject": "Hi", "body": "Welcome"})],
        conditions=[WorkflowCondition("status", "equals", "lead")],
    )


async def test_instantiate_copies_template_into_disabled_rule() -> None:
    template_repo = AsyncMock()
    template_repo.get_template.return_value = _template()
    rule_repo = AsyncMock()
    service = WorkflowTemplateService(template_repo, rule_repo)

    await service.instantiate("tpl-1", created_by="user-1")

    data = rule_repo.create_rule.await_args.args[0]
    assert data.name == "Welcome series"
    assert data.trigger == WorkflowTrigger.CLIENT_CREATED
    assert data.enabled is False
    assert data.trigger_config == {"template_id": "tpl-1"}
    assert data.actions == [{"type": "send_email", "params": {"subject": "Hi", "body": "Welcome"}}]
    assert data.conditions == [{"field": "status", "operator": "equals", "value": "lead"}]
    assert data.created_by == "user-1"


async def test_instantiate_accepts_overrides() -> None:
    template_repo = AsyncMock()
    template_repo.get_template.return_value = _template()
    rule_repo = AsyncMock()
    await WorkflowTemplateService(template_repo, rule_repo).instantiate(
        "tpl-1", name="My welcome", enabled=True, priority=7
    )
    data = rule_repo.create_rule.await_args.args[0]
    assert (data.name, data.enabled, data.priority) == ("My welcome", True, 7)


async def test_instantiate_missing_template_raises() -> None:
    template_repo = AsyncMock()
    template_repo.get_template.return_value = None
    rule_repo = AsyncMock()
    with pytest.raises(ResourceNotFoundException):
        await WorkflowTemplateService(template_repo, rule_repo).instantiate("nope")
    rule_repo.create_rule.assert_not_awaited()
