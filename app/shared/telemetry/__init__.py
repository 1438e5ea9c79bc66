"""Shared telemetry: logging setup and tracing helpers."""

from app.shared.telemetry.logging import get_logger, setup_logging
from app.shared.telemetry.tracing import (
    add_span_attributes,
    add_span_event,
    get_tracer,
    traced,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_tracer",
    "traced",
    "add_span_attributes",
    "add_span_event",
]
