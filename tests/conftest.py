"""Shared pytest fixtures for backend tests.

Provides:
- ``fresh_db``: in-memory SQLite with the submissions schema
- ``make_ws`` / ``make_dead_ws``: AsyncMock WebSocket doubles
- ``client``: Starlette TestClient with the lifespan running
"""

from __future__ import annotations

import os

# Point the app at an in-memory store before any feedcast module imports.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("CORS_ORIGINS", "*")

from unittest.mock import AsyncMock  # noqa: E402

import aiosqlite  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from starlette.websockets import WebSocketState  # noqa: E402

from feedcast.database import init_db  # noqa: E402


def _make_ws(*, name: str | None = None, open: bool = True) -> AsyncMock:
    """Create a mock WebSocket with an async ``send_text`` and a fixed state."""
    ws = AsyncMock(name=name)
    ws.send_text = AsyncMock(name=f"{name}.send_text" if name else "send_text")
    state = WebSocketState.CONNECTED if open else WebSocketState.DISCONNECTED
    ws.client_state = state
    ws.application_state = state
    return ws


def _make_dead_ws(*, name: str | None = None, error: Exception | None = None) -> AsyncMock:
    """Create a mock WebSocket that looks open but whose ``send_text`` always raises."""
    ws = _make_ws(name=name)
    ws.send_text.side_effect = error or RuntimeError("connection closed")
    return ws


@pytest.fixture
def make_ws():
    return _make_ws


@pytest.fixture
def make_dead_ws():
    return _make_dead_ws


@pytest_asyncio.fixture
async def fresh_db():
    """In-memory SQLite database initialised via ``init_db``."""
    conn = await aiosqlite.connect(":memory:")
    conn.row_factory = aiosqlite.Row
    await init_db(conn)
    yield conn
    await conn.close()


@pytest.fixture
def client():
    """TestClient entered as a context manager.

    Entering runs the lifespan and keeps a single event loop (``client.portal``)
    for every HTTP request and WebSocket session in the test.
    """
    from starlette.testclient import TestClient

    from feedcast.config import get_settings
    from feedcast.main import app

    get_settings.cache_clear()
    with TestClient(app) as test_client:
        yield test_client
