"""Trigger processing: match rules for a trigger, run them, record executions.

One execution record is written per enabled rule evaluated, including
rules whose conditions did not match (status skipped). Action failures
are isolated inside the action executor; failures here (loading rules,
writing execution records) are reported and re-raised to the caller.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.application.dtos.workflow import WorkflowExecutionCreate
from app.application.interfaces.repositories import (
    IWorkflowExecutionRepository,
    IWorkflowRuleRepository,
)
from app.application.interfaces.services import IErrorReporter
from app.application.services.condition_evaluator import evaluate_conditions
from app.application.use_cases.workflows.action_executor import WorkflowActionExecutor
from app.domain.entities.workflow import (
    WorkflowActionExecution,
    WorkflowExecution,
    WorkflowRule,
)
from app.domain.exceptions import ValidationException
from app.shared.enums import WorkflowExecutionStatus, WorkflowTrigger
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.datetime import elapsed_ms, utc_now

logger = get_logger(__name__)


def _coerce_trigger(trigger: WorkflowTrigger | str) -> WorkflowTrigger:
    if isinstance(trigger, WorkflowTrigger):
        return trigger
    try:
        return WorkflowTrigger(trigger)
    except ValueError:
        raise ValidationException(
            f"Unknown workflow trigger: {trigger!r}", field="trigger"
        ) from None


@dataclass
class _PendingRun:
    """A matched rule whose running record exists but whose actions have not finished."""

    rule: WorkflowRule
    execution: WorkflowExecution
    outcomes: list[WorkflowActionExecution] | None = None
    error: BaseException | None = None


class WorkflowTriggerProcessor:
    """Entry point for firing a trigger (implements IWorkflowTriggerProcessor)."""

    def __init__(
        self,
        rule_repo: IWorkflowRuleRepository,
        execution_repo: IWorkflowExecutionRepository,
        action_executor: WorkflowActionExecutor,
        error_reporter: IErrorReporter,
        *,
        concurrent_rules: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.rule_repo = rule_repo
        self.execution_repo = execution_repo
        self.action_executor = action_executor
        self.error_reporter = error_reporter
        self.concurrent_rules = concurrent_rules
        self._clock = clock

    @traced("workflow.process_trigger")
    async def process_workflow_trigger(
        self, trigger: WorkflowTrigger | str, payload: Mapping[str, Any]
    ) -> list[WorkflowExecution]:
        """Run every enabled rule for trigger against payload, highest priority first.

        Returns:
            Final execution records in processing order.

        Raises:
            ValidationException: trigger is not a known trigger value.
            Exception: rule loading or execution persistence failed (after reporting).
        """
        kind = _coerce_trigger(trigger)
        data = dict(payload or {})
        try:
            # A cached rule list can lag behind a toggle or edit; re-check each rule.
            rules = [
                rule
                for rule in await self.rule_repo.get_by_trigger(kind)
                if rule.can_trigger_on(kind) and rule.is_usable()
            ]
            add_span_attributes(**{"workflow.trigger": kind.value, "workflow.rule_count": len(rules)})
            if self.concurrent_rules:
                executions = await self._process_concurrently(kind, rules, data)
            else:
                executions = [await self._process_rule(kind, rule, data) for rule in rules]
        except Exception as e:
            self.error_reporter.report(e, {"trigger": kind.value})
            raise

        logger.info(
            "Processed trigger %s: %d rule(s), %d matched",
            kind.value,
            len(executions),
            sum(1 for ex in executions if ex.conditions_met),
        )
        return executions

    async def _record_skipped(
        self, kind: WorkflowTrigger, rule: WorkflowRule, data: dict[str, Any]
    ) -> WorkflowExecution:
        started = self._clock()
        return await self.execution_repo.create_execution(
            WorkflowExecutionCreate(
                workflow_id=rule.id,
                workflow_name=rule.name,
                trigger=kind.value,
                trigger_data=data,
                conditions_met=False,
                status=WorkflowExecutionStatus.SKIPPED,
                started_at=started,
                completed_at=started,
                duration=0,
            )
        )

    async def _record_running(
        self, kind: WorkflowTrigger, rule: WorkflowRule, data: dict[str, Any]
    ) -> WorkflowExecution:
        return await self.execution_repo.create_execution(
            WorkflowExecutionCreate(
                workflow_id=rule.id,
                workflow_name=rule.name,
                trigger=kind.value,
                trigger_data=data,
                conditions_met=True,
                status=WorkflowExecutionStatus.RUNNING,
                started_at=self._clock(),
            )
        )

    async def _finalize(
        self,
        execution: WorkflowExecution,
        outcomes: list[WorkflowActionExecution] | None,
        error: BaseException | None,
    ) -> WorkflowExecution:
        finished = self._clock()
        changes: dict[str, Any] = {
            "actions_executed": [o.to_dict() for o in outcomes or []],
            "completed_at": finished,
            "duration": elapsed_ms(execution.started_at, finished),
        }
        if error is None:
            changes["status"] = WorkflowExecutionStatus.COMPLETED
        else:
            changes["status"] = WorkflowExecutionStatus.FAILED
            changes["error"] = str(error) or error.__class__.__name__
        return await self.execution_repo.update_execution(execution.id, changes)

    async def _run_actions(self, run: _PendingRun, data: dict[str, Any]) -> None:
        try:
            run.outcomes = await self.action_executor.execute_workflow_actions(run.rule, data)
        except Exception as e:
            logger.exception(
                "Workflow %s execution %s failed outside action isolation",
                run.rule.id,
                run.execution.id,
            )
            self.error_reporter.report(
                e, {"workflow_id": run.rule.id, "execution_id": run.execution.id}
            )
            run.error = e

    async def _process_rule(
        self, kind: WorkflowTrigger, rule: WorkflowRule, data: dict[str, Any]
    ) -> WorkflowExecution:
        if not evaluate_conditions(rule.conditions, data):
            logger.debug("Workflow %s skipped: conditions not met", rule.id)
            return await self._record_skipped(kind, rule, data)
        run = _PendingRun(rule=rule, execution=await self._record_running(kind, rule, data))
        await self._run_actions(run, data)
        return await self._finalize(run.execution, run.outcomes, run.error)

    async def _process_concurrently(
        self, kind: WorkflowTrigger, rules: list[WorkflowRule], data: dict[str, Any]
    ) -> list[WorkflowExecution]:
        """Evaluate and record in order, run matched action lists as parallel tasks, finalize in order."""
        ordered: list[WorkflowExecution | _PendingRun] = []
        for rule in rules:
            if evaluate_conditions(rule.conditions, data):
                ordered.append(
                    _PendingRun(rule=rule, execution=await self._record_running(kind, rule, data))
                )
            else:
                ordered.append(await self._record_skipped(kind, rule, data))

        pending = [item for item in ordered if isinstance(item, _PendingRun)]
        if pending:
            async with asyncio.TaskGroup() as tg:
                for run in pending:
                    tg.create_task(self._run_actions(run, data))

        results: list[WorkflowExecution] = []
        for item in ordered:
            if isinstance(item, _PendingRun):
                results.append(await self._finalize(item.execution, item.outcomes, item.error))
            else:
                results.append(item)
        return results
