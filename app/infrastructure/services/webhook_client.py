"""Outbound webhook client over a shared httpx.AsyncClient (implements IWebhookClient)."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import httpx

from app.domain.exceptions import WebhookDeliveryException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _decode_body(response: httpx.Response) -> Any:
    """Parsed JSON when the response carries it, else text (None when empty)."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxWebhookClient:
    """Calls webhook URLs. Any non-2xx status or transport error raises WebhookDeliveryException.

    The httpx client is owned by the caller (app lifespan) so connections
    are pooled across actions and closed once at shutdown.
    """

    def __init__(self, http_client: httpx.AsyncClient, *, timeout: float = 10.0) -> None:
        self._http = http_client
        self._timeout = timeout

    async def send(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: Any = None,
    ) -> dict[str, Any]:
        content = json.dumps(body, default=str).encode() if body is not None else None
        try:
            response = await self._http.request(
                method.upper(),
                url,
                headers=dict(headers),
                content=content,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise WebhookDeliveryException(url, f"timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise WebhookDeliveryException(url, str(e) or e.__class__.__name__) from e

        if not response.is_success:
            reason = response.reason_phrase or str(response.status_code)
            logger.warning(
                "Webhook %s %s returned %d %s", method.upper(), url, response.status_code, reason
            )
            raise WebhookDeliveryException(url, reason, response.status_code)

        return {"status_code": response.status_code, "body": _decode_body(response)}
