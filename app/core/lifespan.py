"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring: logging, the shared outbound
HTTP client used by webhook actions, the optional Redis cache, and the
SQL engine dispose.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.core.config import get_settings
from app.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, webhook HTTP client, Redis cache (if enabled).
    Shutdown order: HTTP client close, cache disconnect, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    setup_logging()

    # Shared HTTP client for webhook actions (connection reuse).
    app.state.webhook_http_client = httpx.AsyncClient(
        timeout=settings.webhook_timeout_seconds,
        follow_redirects=False,
    )

    if settings.redis_enabled:
        from app.infrastructure.cache.redis_cache import CacheService

        cache = CacheService(settings=settings)
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None

    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    # ---- Shutdown ----
    if getattr(app.state, "webhook_http_client", None) is not None:
        await app.state.webhook_http_client.aclose()
        app.state.webhook_http_client = None
        logger.info("Webhook HTTP client closed")

    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        app.state.cache = None
        logger.info("Cache disconnected")

    from app.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
    logger.info("Database engine disposed")
