"""Pytest configuration and shared fixtures.

This module provides:
- A fresh in-memory SQLite database per test (StaticPool, one connection)
- Async session fixtures for repository/service tests
- FastAPI app and HTTP client fixtures for route tests
- API key fixtures for authenticated requests
"""

# Set environment variables BEFORE any imports that trigger Settings validation
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEBUG"] = "true"
os.environ["ADMIN_API_KEY"] = "bsvc_test-admin-key-0123456789abcdef"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import AsyncGenerator, Callable, Generator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from core.cache import ResponseCache
from core.config import clear_settings_cache
from core.database import Base, create_session_maker

TEST_ADMIN_API_KEY = os.environ["ADMIN_API_KEY"]

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory database with the full schema.

    StaticPool keeps the single connection alive, so every session in the
    test sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(test_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Session for repository/service tests. Tests commit as needed."""
    async with session_maker() as session:
        yield session


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================


class RenderRecorder:
    """Collects ``(stage, commit_id)`` calls from the image pipeline."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def __call__(self, stage: str, commit_id: str) -> None:
        self.calls.append((stage, commit_id))

    def count(self, stage: str) -> int:
        return sum(1 for s, _ in self.calls if s == stage)


@pytest.fixture
def render_recorder() -> RenderRecorder:
    return RenderRecorder()


@pytest_asyncio.fixture(scope="function")
async def app(
    test_engine: AsyncEngine,
    session_maker: async_sessionmaker[AsyncSession],
    render_recorder: RenderRecorder,
) -> AsyncGenerator[FastAPI]:
    """FastAPI app wired to the test database.

    The lifespan is not run by ASGITransport, so app state is set here.
    """
    from main import app as fastapi_app

    fastapi_app.state.engine = test_engine
    fastapi_app.state.session_maker = session_maker
    fastapi_app.state.image_cache = ResponseCache()
    fastapi_app.state.render_hook = render_recorder
    fastapi_app.state.init_done = True
    fastapi_app.state.init_error = None

    yield fastapi_app

    fastapi_app.state.render_hook = None


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing routes."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-API-Key": TEST_ADMIN_API_KEY}


# =============================================================================
# Converter Fakes
# =============================================================================


@pytest.fixture
def fake_convert(monkeypatch: pytest.MonkeyPatch) -> Callable[..., bytes]:
    """Replace rasterization with a cheap deterministic stand-in.

    Returns bytes tagged with the requested format so tests can tell PNG
    and JPEG results apart without the cairo native library.
    """

    def _convert(svg: bytes, fmt: str, width: int = 0, height: int = 0) -> bytes:
        return f"{fmt}:".encode() + svg[:32]

    monkeypatch.setattr("services.images_service.convert", _convert)
    return _convert


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio backend for anyio (required by httpx)."""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None]:
    """Reset settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
