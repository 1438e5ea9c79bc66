"""Request context management using contextvars.

Async-safe storage for request-scoped data: the acting user (for audit
and created_by stamping) and the request id (for log correlation).

Usage:
    set_current_actor(actor_id="user123", actor_type=ActorType.USER)
    actor_id = get_current_actor_id()
"""

from contextvars import ContextVar
from dataclasses import dataclass

from app.shared.enums import ActorType

_current_actor_id: ContextVar[str | None] = ContextVar("current_actor_id", default=None)
_current_actor_type: ContextVar[ActorType] = ContextVar(
    "current_actor_type", default=ActorType.SYSTEM
)
_current_request_id: ContextVar[str | None] = ContextVar(
    "current_request_id", default=None
)


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of the current actor context."""

    actor_id: str | None
    actor_type: ActorType
    request_id: str | None = None


def set_current_actor(
    actor_id: str | None,
    actor_type: ActorType = ActorType.USER,
    request_id: str | None = None,
) -> None:
    """Set the acting user for the current request/task.

    Raises:
        ValueError: If actor_type is USER and actor_id is None or empty.
    """
    if actor_type == ActorType.USER and not actor_id:
        raise ValueError("actor_id is required when actor_type is USER")
    _current_actor_id.set(actor_id)
    _current_actor_type.set(actor_type)
    _current_request_id.set(request_id)


def clear_current_actor() -> None:
    """Reset to the system actor with no request id."""
    _current_actor_id.set(None)
    _current_actor_type.set(ActorType.SYSTEM)
    _current_request_id.set(None)


def get_current_actor_id() -> str | None:
    """Return the current actor ID, or None for the system actor."""
    return _current_actor_id.get()


def get_current_actor_type() -> ActorType:
    """Return the current actor type (defaults to SYSTEM if not set)."""
    return _current_actor_type.get()


def get_current_request_id() -> str | None:
    return _current_request_id.get()


def get_actor_context() -> ActorContext:
    """Return a snapshot of the current actor context."""
    return ActorContext(
        actor_id=_current_actor_id.get(),
        actor_type=_current_actor_type.get(),
        request_id=_current_request_id.get(),
    )
