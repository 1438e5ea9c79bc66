"""Workflow API: thin routes delegating to the rule/execution/template repositories and the trigger processor.

Fixed sub-paths (/executions, /templates, /triggers) are declared before
/{workflow_id} so they are not captured as ids.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query

from app.api.v1.dependencies import (
    get_trigger_processor,
    get_workflow_execution_repo,
    get_workflow_rule_repo,
    get_workflow_rule_repo_for_write,
    get_workflow_template_repo,
    get_workflow_template_repo_for_write,
    get_workflow_template_service,
)
from app.application.dtos.workflow import WorkflowRuleCreate, WorkflowTemplateCreate
from app.application.use_cases.workflows import (
    WorkflowTemplateService,
    WorkflowTriggerProcessor,
)
from app.core.config import get_settings
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.repositories import (
    WorkflowExecutionRepository,
    WorkflowRuleRepository,
    WorkflowTemplateRepository,
)
from app.schemas.workflow import (
    TemplateInstantiateRequest,
    TriggerFireResponse,
    WorkflowCreateRequest,
    WorkflowExecutionResponse,
    WorkflowResponse,
    WorkflowTemplateCreateRequest,
    WorkflowTemplateResponse,
    WorkflowToggleRequest,
    WorkflowUpdateRequest,
)
from app.shared.context import get_current_actor_id

router = APIRouter()


def _history_limit(limit: int | None) -> int:
    return limit if limit is not None else get_settings().workflow_execution_history_limit


@router.post("", response_model=WorkflowResponse, status_code=201)
async def create_workflow(
    body: WorkflowCreateRequest,
    rule_repo: Annotated[WorkflowRuleRepository, Depends(get_workflow_rule_repo_for_write)],
):
    """Create a workflow rule. Actions are validated against their type's params."""
    rule = await rule_repo.create_rule(
        WorkflowRuleCreate(
            name=body.name,
            trigger=body.trigger,
            actions=[a.to_config() for a in body.actions],
            conditions=[c.model_dump(mode="json") for c in body.conditions],
            description=body.description,
            trigger_config=body.trigger_config,
            enabled=body.enabled,
            priority=body.priority,
            created_by=get_current_actor_id(),
        )
    )
    return WorkflowResponse.model_validate(rule)


@router.get("", response_model=list[WorkflowResponse])
async def list_workflows(
    rule_repo: Annotated[WorkflowRuleRepository, Depends(get_workflow_rule_repo)],
    enabled_only: bool = False,
):
    """List workflow rules, highest priority first."""
    rules = await rule_repo.list_rules(enabled_only=enabled_only)
    return [WorkflowResponse.model_validate(r) for r in rules]


@router.get("/executions", response_model=list[WorkflowExecutionResponse])
async def list_executions(
    execution_repo: Annotated[
        WorkflowExecutionRepository, Depends(get_workflow_execution_repo)
    ],
    workflow_id: str | None = None,
    limit: int | None = Query(None, ge=1, le=1000),
):
    """Execution history, newest first, optionally for one workflow."""
    executions = await execution_repo.list_executions(
        workflow_id=workflow_id, limit=_history_limit(limit)
    )
    return [WorkflowExecutionResponse.model_validate(e) for e in executions]


@router.get("/executions/{execution_id}", response_model=WorkflowExecutionResponse)
async def get_execution(
    execution_id: str,
    execution_repo: Annotated[
        WorkflowExecutionRepository, Depends(get_workflow_execution_repo)
    ],
):
    """Get workflow execution by id."""
    execution = await execution_repo.get_execution(execution_id)
    if not execution:
        raise ResourceNotFoundException("workflow_execution", execution_id)
    return WorkflowExecutionResponse.model_validate(execution)


@router.post("/triggers/{trigger}", response_model=TriggerFireResponse)
async def fire_trigger(
    trigger: str,
    processor: Annotated[WorkflowTriggerProcessor, Depends(get_trigger_processor)],
    payload: Annotated[dict[str, Any] | None, Body()] = None,
):
    """Fire a trigger with a JSON payload; returns one execution per enabled rule evaluated."""
    executions = await processor.process_workflow_trigger(trigger, payload or {})
    return TriggerFireResponse(
        trigger=trigger,
        rules_evaluated=len(executions),
        rules_matched=sum(1 for e in executions if e.conditions_met),
        executions=[WorkflowExecutionResponse.model_validate(e) for e in executions],
    )


@router.get("/templates", response_model=list[WorkflowTemplateResponse])
async def list_templates(
    template_repo: Annotated[WorkflowTemplateRepository, Depends(get_workflow_template_repo)],
    public_only: bool = True,
):
    """List workflow templates by category and name."""
    templates = await template_repo.list_templates(public_only=public_only)
    return [WorkflowTemplateResponse.model_validate(t) for t in templates]


@router.post("/templates", response_model=WorkflowTemplateResponse, status_code=201)
async def create_template(
    body: WorkflowTemplateCreateRequest,
    template_repo: Annotated[
        WorkflowTemplateRepository, Depends(get_workflow_template_repo_for_write)
    ],
):
    """Store a reusable workflow template."""
    template = await template_repo.create_template(
        WorkflowTemplateCreate(
            name=body.name,
            description=body.description,
            category=body.category,
            trigger=body.trigger,
            actions=[a.to_config() for a in body.actions],
            conditions=[c.model_dump(mode="json") for c in body.conditions],
            is_public=body.is_public,
            created_by=get_current_actor_id(),
        )
    )
    return WorkflowTemplateResponse.model_validate(template)


@router.post(
    "/templates/{template_id}/instantiate",
    response_model=WorkflowResponse,
    status_code=201,
)
async def instantiate_template(
    template_id: str,
    template_service: Annotated[
        WorkflowTemplateService, Depends(get_workflow_template_service)
    ],
    body: TemplateInstantiateRequest | None = None,
):
    """Create a new rule from a template (disabled unless requested otherwise)."""
    options = body or TemplateInstantiateRequest()
    rule = await template_service.instantiate(
        template_id,
        name=options.name,
        enabled=options.enabled,
        priority=options.priority,
        created_by=get_current_actor_id(),
    )
    return WorkflowResponse.model_validate(rule)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    rule_repo: Annotated[WorkflowRuleRepository, Depends(get_workflow_rule_repo)],
):
    """Get workflow rule by id."""
    rule = await rule_repo.get_rule(workflow_id)
    if not rule:
        raise ResourceNotFoundException("workflow", workflow_id)
    return WorkflowResponse.model_validate(rule)


@router.patch("/{workflow_id}", response_model=WorkflowResponse)
async def update_workflow(
    workflow_id: str,
    body: WorkflowUpdateRequest,
    rule_repo: Annotated[WorkflowRuleRepository, Depends(get_workflow_rule_repo_for_write)],
):
    """Partially update a workflow rule."""
    rule = await rule_repo.update_rule(workflow_id, body.to_changes())
    return WorkflowResponse.model_validate(rule)


@router.patch("/{workflow_id}/enabled", response_model=WorkflowResponse)
async def toggle_workflow(
    workflow_id: str,
    body: WorkflowToggleRequest,
    rule_repo: Annotated[WorkflowRuleRepository, Depends(get_workflow_rule_repo_for_write)],
):
    """Enable or disable a workflow rule."""
    rule = await rule_repo.toggle_rule(workflow_id, body.enabled)
    return WorkflowResponse.model_validate(rule)


@router.delete("/{workflow_id}", status_code=204)
async def delete_workflow(
    workflow_id: str,
    rule_repo: Annotated[WorkflowRuleRepository, Depends(get_workflow_rule_repo_for_write)],
):
    """Hard-delete a workflow rule. Its execution history is kept."""
    await rule_repo.delete_rule(workflow_id)


@router.get("/{workflow_id}/executions", response_model=list[WorkflowExecutionResponse])
async def get_workflow_executions(
    workflow_id: str,
    rule_repo: Annotated[WorkflowRuleRepository, Depends(get_workflow_rule_repo)],
    execution_repo: Annotated[
        WorkflowExecutionRepository, Depends(get_workflow_execution_repo)
    ],
    limit: int | None = Query(None, ge=1, le=1000),
):
    """Execution history for one workflow, newest first."""
    if not await rule_repo.get_rule(workflow_id):
        raise ResourceNotFoundException("workflow", workflow_id)
    executions = await execution_repo.list_executions(
        workflow_id=workflow_id, limit=_history_limit(limit)
    )
    return [WorkflowExecutionResponse.model_validate(e) for e in executions]
