"""Pytest configuration and fixtures for the workflow engine.

DATABASE_URL defaults to an in-memory SQLite database (aiosqlite) so the
suite runs without PostgreSQL. Each test gets a fresh schema built from
the ORM metadata; the app's session dependencies are overridden to use it.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncIterator, Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.infrastructure.persistence import models  # noqa: F401  (registers tables)
from app.infrastructure.persistence.database import (
    Base,
    configure_sqlite_engine,
    get_db,
    get_db_transactional,
    run_after_commit,
)
from app.main import create_app


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory SQLite engine (savepoints and foreign keys on) with all tables created."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite_engine(eng)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Database session for repository/integration tests. Rolls back after test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def webhook_requests() -> list[httpx.Request]:
    """Requests captured by the fake webhook endpoint."""
    return []


@pytest.fixture
def webhook_handler(
    webhook_requests: list[httpx.Request],
) -> Callable[[httpx.Request], httpx.Response]:
    """Default webhook endpoint: records the request, answers 200 {"ok": true}."""

    def handler(request: httpx.Request) -> httpx.Response:
        webhook_requests.append(request)
        return httpx.Response(200, json={"ok": True})

    return handler


@pytest.fixture
async def app(
    session_factory: async_sessionmaker[AsyncSession],
    webhook_handler: Callable[[httpx.Request], httpx.Response],
):
    """FastAPI app wired to the test database and a mocked webhook transport.

    ASGITransport does not run the lifespan, so the state it would set up
    is assigned here.
    """

    async def _get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    async def _get_db_transactional() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            async with session.begin():
                yield session
            await run_after_commit(session)

    application = create_app()
    application.dependency_overrides[get_db] = _get_db
    application.dependency_overrides[get_db_transactional] = _get_db_transactional
    application.state.cache = None
    application.state.webhook_http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(webhook_handler)
    )
    yield application
    await application.state.webhook_http_client.aclose()


@pytest.fixture
async def client(app) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
