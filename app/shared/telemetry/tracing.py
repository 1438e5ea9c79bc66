"""Tracing helpers for the workflow engine (OpenTelemetry API only).

Spans are no-ops until an SDK tracer provider is installed by the host
process, so the engine can be traced without depending on an exporter.
"""

import asyncio
from collections.abc import Callable
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

_TRACER_NAME = "app.workflows"

# Only these kwarg names are copied onto spans; payloads and params may hold PII.
_SAFE_SPAN_ATTR_KEYS = frozenset({
    "trigger", "rule_id", "workflow_id", "execution_id", "action_type", "limit",
})


def get_tracer() -> trace.Tracer:
    """Return the tracer used by workflow components."""
    return trace.get_tracer(_TRACER_NAME)


def _set_safe_span_attrs(span: trace.Span, kwargs: dict[str, Any]) -> None:
    for key, value in kwargs.items():
        if key in _SAFE_SPAN_ATTR_KEYS and value is not None:
            span.set_attribute(f"workflow.{key}", str(getattr(value, "value", value)))


def traced(operation_name: str) -> Callable:
    """Wrap an async function in a span named operation_name.

    Exceptions are recorded on the span and re-raised.
    """

    def decorator(func: Callable) -> Callable:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"traced() expects a coroutine function, got {func!r}")

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            with get_tracer().start_as_current_span(operation_name) as span:
                _set_safe_span_attrs(span, kwargs)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Add attributes to the current span (ignored when not recording)."""
    span = trace.get_current_span()
    if span and span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


def add_span_event(name: str, attributes: dict[str, Any] | None = None) -> None:
    """Add an event to the current span (ignored when not recording)."""
    span = trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name, attributes=attributes or {})
