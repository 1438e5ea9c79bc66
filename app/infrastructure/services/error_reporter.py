"""Logging-backed error reporter (implements IErrorReporter)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.domain.exceptions import CrmAutomationException
from app.shared.context import get_current_request_id
from app.shared.telemetry.logging import get_logger

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class LoggingErrorReporter:
    """Writes reported failures to the log with their context.

    Domain exceptions are logged with their error code and without a
    traceback; anything else gets the traceback at the requested level.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger("app.workflows.errors")

    def report(
        self,
        exc: BaseException,
        context: Mapping[str, Any] | None = None,
        *,
        severity: str = "error",
    ) -> None:
        level = _LEVELS.get(severity, logging.ERROR)
        ctx = dict(context or {})
        request_id = get_current_request_id()
        if request_id:
            ctx.setdefault("request_id", request_id)
        try:
            if isinstance(exc, CrmAutomationException):
                self._logger.log(
                    level, "%s: %s (context=%s)", exc.error_code, exc.message, ctx
                )
            else:
                self._logger.log(
                    level,
                    "%s: %s (context=%s)",
                    exc.__class__.__name__,
                    exc,
                    ctx,
                    exc_info=(type(exc), exc, exc.__traceback__),
                )
        except Exception:  # noqa: BLE001
            # Reporting must never take down the caller.
            logging.getLogger(__name__).debug("Error reporter failed", exc_info=True)
