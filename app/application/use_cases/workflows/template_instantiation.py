"""Instantiate a stored workflow template into a new rule."""

from __future__ import annotations

from app.application.dtos.workflow import WorkflowRuleCreate
from app.application.interfaces.repositories import (
    IWorkflowRuleRepository,
    IWorkflowTemplateRepository,
)
from app.domain.entities.workflow import WorkflowRule
from app.domain.exceptions import ResourceNotFoundException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class WorkflowTemplateService:
    """Copies a template's trigger, conditions and actions into a fresh rule."""

    def __init__(
        self,
        template_repo: IWorkflowTemplateRepository,
        rule_repo: IWorkflowRuleRepository,
    ) -> None:
        self.template_repo = template_repo
        self.rule_repo = rule_repo

    async def instantiate(
        self,
        template_id: str,
        *,
        name: str | None = None,
        enabled: bool = False,
        priority: int = 0,
        created_by: str | None = None,
    ) -> WorkflowRule:
        """Create a rule from template_id.

        New rules start disabled unless enabled=True so the owner can review
        the copied actions before they fire.

        Raises:
            ResourceNotFoundException: template does not exist.
        """
        template = await self.template_repo.get_template(template_id)
        if template is None:
            raise ResourceNotFoundException("workflow_template", template_id)

        rule = await self.rule_repo.create_rule(
            WorkflowRuleCreate(
                name=name or template.name,
                description=template.description,
                trigger=template.trigger,
                conditions=[c.to_dict() for c in template.conditions],
                actions=[a.to_dict() for a in template.actions],
                trigger_config={"template_id": template.id},
                enabled=enabled,
                priority=priority,
                created_by=created_by,
            )
        )
        logger.info("Instantiated template %s as workflow %s", template.id, rule.id)
        return rule
