"""Unit tests for LoggingErrorReporter."""

import logging

from app.domain.exceptions import WebhookDeliveryException
from app.infrastructure.services.error_reporter import LoggingErrorReporter
from app.shared.context import clear_current_actor, set_current_actor
from app.shared.enums import ActorType


def test_reports_domain_errors_without_traceback(caplog) -> None:
    reporter = LoggingErrorReporter(logging.getLogger("test.reporter"))
    with caplog.at_level(logging.WARNING, logger="test.reporter"):
        reporter.report(
            WebhookDeliveryException("https://h.example", "Not Found", 404),
            {"workflow_id": "r1"},
            severity="warning",
        )
    (record,) = caplog.records
    assert record.levelno == logging.WARNING
    assert "WEBHOOK_FAILED" in record.getMessage()
    assert "r1" in record.getMessage()
    assert record.exc_info is None


def test_reports_unexpected_errors_with_traceback_and_request_id(caplog) -> None:
    reporter = LoggingErrorReporter(logging.getLogger("test.reporter"))
    set_current_actor(None, ActorType.SYSTEM, request_id="req-42")
    try:
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            with caplog.at_level(logging.ERROR, logger="test.reporter"):
                reporter.report(e, {"trigger": "client_created"})
    finally:
        clear_current_actor()
    (record,) = caplog.records
    assert record.levelno == logging.ERROR
    assert record.exc_info is not None
    assert "req-42" in record.getMessage()


def test_unknown_severity_logs_as_error(caplog) -> None:
    reporter = LoggingErrorReporter(logging.getLogger("test.reporter"))
    with caplog.at_level(logging.DEBUG, logger="test.reporter"):
        reporter.report(ValueError("x"), severity="catastrophic")
    assert caplog.records[0].levelno == logging.ERROR
