"""Request context middleware.

Generates or forwards X-Request-ID, reads the acting user from X-Actor-ID,
and binds both to contextvars (app.shared.context) for the duration of the
request so audit events, created_by stamps and logs can see them. The
request id is echoed on the response. Client-provided values are sanitized
(length + character set) to prevent log injection.
Uses raw ASGI (no BaseHTTPMiddleware) so the contextvars reach the endpoint.
"""

import re
import uuid
from typing import Callable

from app.shared.context import clear_current_actor, set_current_actor
from app.shared.enums import ActorType

# Safe for logging: alphanumeric, hyphen, underscore; max length to avoid abuse.
HEADER_VALUE_MAX_LENGTH = 64
HEADER_VALUE_ALLOWED_PATTERN = re.compile(
    r"^[a-zA-Z0-9_.@-]{1," + str(HEADER_VALUE_MAX_LENGTH) + r"}$"
)


def _get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def _clean(raw: str | None) -> str | None:
    """Return the stripped value if it is safe to log, else None."""
    if not raw:
        return None
    value = raw.strip()
    if not HEADER_VALUE_ALLOWED_PATTERN.match(value):
        return None
    return value


def _sanitize_request_id(raw: str | None) -> str:
    """Return raw if valid and safe; otherwise return a new UUID."""
    return _clean(raw) or str(uuid.uuid4())


def RequestContextMiddleware(
    app: Callable,
    request_id_header: str = "X-Request-ID",
    actor_id_header: str = "X-Actor-ID",
) -> Callable:
    """Bind request id and actor to the request context. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = _sanitize_request_id(_get_header(scope, request_id_header))
        actor_id = _clean(_get_header(scope, actor_id_header))
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((request_id_header.encode(), request_id.encode()))
                message["headers"] = headers
            await send(message)

        set_current_actor(
            actor_id,
            ActorType.USER if actor_id else ActorType.SYSTEM,
            request_id=request_id,
        )
        try:
            await app(scope, receive, send_wrapper)
        finally:
            clear_current_actor()

    return asgi_app
