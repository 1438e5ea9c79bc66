"""Unit tests for HttpxWebhookClient over httpx.MockTransport."""

import json

import httpx
import pytest

from app.domain.exceptions import WebhookDeliveryException
from app.infrastructure.services.webhook_client import HttpxWebhookClient


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_posts_json_body_with_given_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"received": True})

    async with _client(handler) as http:
        result = await HttpxWebhookClient(http).send(
            "https://hooks.example.com/crm",
            "post",
            {"Content-Type": "application/json", "X-Token": "abc"},
            {"name": "Ada"},
        )
    assert result == {"status_code": 201, "body": {"received": True}}
    request = seen[0]
    assert request.method == "POST"
    assert request.headers["x-token"] == "abc"
    assert json.loads(request.content) == {"name": "Ada"}


async def test_non_json_and_empty_responses() -> None:
    async with _client(lambda r: httpx.Response(200, text="accepted")) as http:
        result = await HttpxWebhookClient(http).send("https://h.example", "GET", {})
    assert result == {"status_code": 200, "body": "accepted"}

    async with _client(lambda r: httpx.Response(204)) as http:
        result = await HttpxWebhookClient(http).send("https://h.example", "DELETE", {})
    assert result == {"status_code": 204, "body": None}


async def test_non_success_status_raises_with_reason() -> None:
    async with _client(lambda r: httpx.Response(503)) as http:
        with pytest.raises(WebhookDeliveryException) as exc_info:
            await HttpxWebhookClient(http).send("https://h.example", "POST", {}, {"a": 1})
    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "Webhook failed: Service Unavailable"


async def test_transport_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as http:
        with pytest.raises(WebhookDeliveryException) as exc_info:
            await HttpxWebhookClient(http).send("https://h.example", "POST", {})
    assert exc_info.value.status_code is None
    assert "connection refused" in exc_info.value.message


async def test_timeout_raises_with_timeout_reason() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    async with _client(handler) as http:
        with pytest.raises(WebhookDeliveryException) as exc_info:
            await HttpxWebhookClient(http, timeout=2.0).send("https://h.example", "POST", {})
    assert exc_info.value.message == "Webhook failed: timed out after 2.0s"
