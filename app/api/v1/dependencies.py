"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, repositories and the workflow
engine. All use cases are built from infrastructure implementations here;
routes depend only on these dependencies, not on infra directly.

Read endpoints use get_db (no commit); writes and trigger firing use
get_db_transactional so rule changes, audit rows, execution records and
action side effects commit or roll back together.
"""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.use_cases.workflows import (
    WorkflowActionExecutor,
    WorkflowActionHandlers,
    WorkflowTemplateService,
    WorkflowTriggerProcessor,
)
from app.core.config import get_settings
from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import (
    AuditLogRepository,
    ClientRepository,
    CommunicationRepository,
    TaskRepository,
    WorkflowExecutionRepository,
    WorkflowRuleRepository,
    WorkflowTemplateRepository,
)
from app.infrastructure.services import (
    CommunicationService,
    HttpxWebhookClient,
    LogOnlyDeliveryProvider,
    LoggingErrorReporter,
    SystemAuditService,
)


def get_cache(request: Request) -> CacheProtocol | None:
    """Redis cache set in app lifespan (app.state.cache) when enabled; else None."""
    return getattr(request.app.state, "cache", None)


def get_webhook_http_client(request: Request) -> httpx.AsyncClient:
    """Shared outbound HTTP client created in app lifespan."""
    client = getattr(request.app.state, "webhook_http_client", None)
    if client is None:
        raise RuntimeError("Webhook HTTP client is not initialized; app lifespan did not run")
    return client


def get_error_reporter() -> LoggingErrorReporter:
    """Error reporter for orchestration and action failures."""
    return LoggingErrorReporter()


def get_webhook_client(
    http_client: Annotated[httpx.AsyncClient, Depends(get_webhook_http_client)],
) -> HttpxWebhookClient:
    """Webhook client over the shared HTTP client with the configured timeout."""
    return HttpxWebhookClient(http_client, timeout=get_settings().webhook_timeout_seconds)


async def get_system_audit_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> SystemAuditService:
    """Build SystemAuditService for the write path (same session as request)."""
    return SystemAuditService(AuditLogRepository(db))


async def get_workflow_rule_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
    cache: Annotated[CacheProtocol | None, Depends(get_cache)],
) -> WorkflowRuleRepository:
    """Rule repository for read operations."""
    return WorkflowRuleRepository(
        db,
        cache=cache,
        cache_ttl=get_settings().cache_ttl_workflow_rules,
        enable_audit=False,
    )


async def get_workflow_rule_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    audit_service: Annotated[SystemAuditService, Depends(get_system_audit_service)],
    cache: Annotated[CacheProtocol | None, Depends(get_cache)],
) -> WorkflowRuleRepository:
    """Rule repository for writes (transactional, audited, invalidates cache)."""
    return WorkflowRuleRepository(
        db,
        audit_service=audit_service,
        cache=cache,
        cache_ttl=get_settings().cache_ttl_workflow_rules,
    )


async def get_workflow_execution_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkflowExecutionRepository:
    """Execution repository for read operations."""
    return WorkflowExecutionRepository(db)


async def get_workflow_template_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkflowTemplateRepository:
    """Template repository for read operations."""
    return WorkflowTemplateRepository(db)


async def get_workflow_template_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> WorkflowTemplateRepository:
    """Template repository for writes (transactional)."""
    return WorkflowTemplateRepository(db)


async def get_workflow_template_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    rule_repo: Annotated[WorkflowRuleRepository, Depends(get_workflow_rule_repo_for_write)],
) -> WorkflowTemplateService:
    """Template instantiation on the write session."""
    return WorkflowTemplateService(WorkflowTemplateRepository(db), rule_repo)


async def get_trigger_processor(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    cache: Annotated[CacheProtocol | None, Depends(get_cache)],
    webhook_client: Annotated[HttpxWebhookClient, Depends(get_webhook_client)],
    error_reporter: Annotated[LoggingErrorReporter, Depends(get_error_reporter)],
) -> WorkflowTriggerProcessor:
    """Workflow engine wired to SQL collaborators on one transactional session."""
    settings = get_settings()
    handlers = WorkflowActionHandlers(
        communication_service=CommunicationService(
            LogOnlyDeliveryProvider(),
            CommunicationRepository(db),
            email_from=settings.workflow_email_from,
            sms_from=settings.workflow_sms_from,
        ),
        task_repo=TaskRepository(db),
        crm_repo=ClientRepository(db),
        webhook_client=webhook_client,
    )
    executor = WorkflowActionExecutor(
        handlers,
        error_reporter,
        action_timeout_seconds=settings.workflow_action_timeout_seconds,
        unit_of_work=db.begin_nested,
    )
    rule_repo = WorkflowRuleRepository(
        db,
        cache=cache,
        cache_ttl=settings.cache_ttl_workflow_rules,
        enable_audit=False,
    )
    return WorkflowTriggerProcessor(
        rule_repo,
        WorkflowExecutionRepository(db),
        executor,
        error_reporter,
    )
