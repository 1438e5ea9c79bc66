"""Runs a rule's actions in order with per-action failure isolation."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from contextlib import AbstractAsyncContextManager, nullcontext
from datetime import datetime
from typing import Any

from app.application.interfaces.services import IErrorReporter
from app.application.use_cases.workflows.action_handlers import WorkflowActionHandlers
from app.domain.entities.workflow import (
    WorkflowActionConfig,
    WorkflowActionExecution,
    WorkflowRule,
)
from app.shared.enums import WorkflowActionType
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_event
from app.shared.utils.datetime import elapsed_ms, utc_now

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]
ClockFn = Callable[[], datetime]
UnitOfWorkFn = Callable[[], AbstractAsyncContextManager[Any]]


def _effective_delay(action: WorkflowActionConfig) -> float:
    """Seconds to wait before the action; a delay action may carry it in params.seconds."""
    if action.delay_seconds > 0:
        return action.delay_seconds
    if action.type == WorkflowActionType.DELAY.value and action.delay is None:
        try:
            seconds = float(action.params.get("seconds") or 0)
        except (TypeError, ValueError):
            return 0.0
        return seconds if seconds > 0 else 0.0
    return 0.0


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, TimeoutError):
        return "Action timed out"
    return getattr(exc, "message", None) or str(exc) or exc.__class__.__name__


class WorkflowActionExecutor:
    """Executes a matched rule's action list.

    Every action gets its own WorkflowActionExecution. A failing action is
    recorded as failed, reported, and the loop moves on to the next one.

    unit_of_work opens a scope around each handler call; wired to a
    SAVEPOINT (AsyncSession.begin_nested) it rolls back only the writes of
    the action that failed and leaves the session usable for the rest.
    """

    def __init__(
        self,
        handlers: WorkflowActionHandlers,
        error_reporter: IErrorReporter,
        *,
        action_timeout_seconds: float | None = None,
        sleep: SleepFn = asyncio.sleep,
        clock: ClockFn = utc_now,
        unit_of_work: UnitOfWorkFn = nullcontext,
    ) -> None:
        self.handlers = handlers
        self.error_reporter = error_reporter
        self.action_timeout_seconds = action_timeout_seconds
        self._sleep = sleep
        self._clock = clock
        self._unit_of_work = unit_of_work

    async def execute_workflow_actions(
        self, rule: WorkflowRule, trigger_payload: Mapping[str, Any]
    ) -> list[WorkflowActionExecution]:
        """Run rule.actions sequentially; return one outcome per action, in order."""
        outcomes: list[WorkflowActionExecution] = []
        for index, action in enumerate(rule.actions):
            outcome = await self._execute_one(rule, index, action, trigger_payload)
            outcomes.append(outcome)
        return outcomes

    async def _execute_one(
        self,
        rule: WorkflowRule,
        index: int,
        action: WorkflowActionConfig,
        payload: Mapping[str, Any],
    ) -> WorkflowActionExecution:
        record = WorkflowActionExecution(action_type=action.type, action_config=action.to_dict())
        started = self._clock()
        record.mark_running(started)
        try:
            delay = _effective_delay(action)
            if delay > 0:
                await self._sleep(delay)
            result = await self._run_handler(action, payload)
        except Exception as e:
            record.mark_failed(_error_message(e), elapsed_ms(started, self._clock()))
            self.error_reporter.report(
                e,
                {
                    "workflow_id": rule.id,
                    "action_index": index,
                    "action_type": action.type,
                },
                severity="warning",
            )
            add_span_event(
                "workflow.action_failed",
                {"workflow.action_type": action.type, "workflow.action_index": index},
            )
            return record

        record.mark_completed(result, elapsed_ms(started, self._clock()))
        logger.debug(
            "Workflow %s action %d (%s) completed in %sms",
            rule.id,
            index,
            action.type,
            record.duration,
        )
        return record

    async def _run_handler(
        self, action: WorkflowActionConfig, payload: Mapping[str, Any]
    ) -> Any:
        async with self._unit_of_work():
            if self.action_timeout_seconds is None:
                return await self.handlers.execute(action, payload)
            async with asyncio.timeout(self.action_timeout_seconds):
                return await self.handlers.execute(action, payload)
