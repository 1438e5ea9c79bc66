"""Shared utilities: context, enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.context import (
    ActorContext,
    clear_current_actor,
    get_actor_context,
    get_current_actor_id,
    get_current_actor_type,
    set_current_actor,
)
from app.shared.enums import (
    ActorType,
    AuditAction,
    ConditionOperator,
    WorkflowActionType,
    WorkflowExecutionStatus,
    WorkflowTrigger,
)
from app.shared.utils import elapsed_ms, ensure_utc, generate_cuid, utc_now

__all__ = [
    "ActorContext",
    "ActorType",
    "AuditAction",
    "ConditionOperator",
    "WorkflowActionType",
    "WorkflowExecutionStatus",
    "WorkflowTrigger",
    "clear_current_actor",
    "elapsed_ms",
    "ensure_utc",
    "generate_cuid",
    "get_actor_context",
    "get_current_actor_id",
    "get_current_actor_type",
    "set_current_actor",
    "utc_now",
]
