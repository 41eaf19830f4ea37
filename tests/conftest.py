"""
pytest configuration and shared fixtures for the TravelRisk API tests.

Key concern: tests must not require a live MongoDB, weather, directions
or Gemini service. We achieve this by:
  1. Patching connect_to_mongo / close_mongo_connection to no-ops so
     FastAPI's lifespan doesn't try to reach a real database.
  2. Setting db_client.client = None (disconnected) so routes without an
     injected fake database answer 503 and health reports "disconnected".
  3. Forcing every external client into mock mode and disabling the
     background alert loop.

Tests that need data use the `fake_db` / `db_client` fixtures, which
inject an in-memory FakeDatabase through app.dependency_overrides.
"""

import os
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("AI_MOCK_MODE", "true")
os.environ.setdefault("WEATHER_MOCK_MODE", "true")
os.environ.setdefault("DIRECTIONS_MOCK_MODE", "true")
os.environ.setdefault("ALERT_POLL_INTERVAL_S", "0")
os.environ.setdefault("ENVIRONMENT", "test")

from fakes import FakeDatabase  # noqa: E402


@pytest.fixture(autouse=True)
async def mock_db():
    """
    Patch the MongoDB lifecycle for every test.

    Tests that need a real db should override this fixture locally.
    """
    with (
        patch("travelrisk.main.connect_to_mongo", new_callable=AsyncMock),
        patch("travelrisk.main.close_mongo_connection", new_callable=AsyncMock),
    ):
        import travelrisk.core.database as db_module

        original_client = db_module.db_client.client
        original_db = db_module.db_client.db

        db_module.db_client.client = None
        db_module.db_client.db = None

        yield

        db_module.db_client.client = original_client
        db_module.db_client.db = original_db


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate-limit counters are global; start every test from zero."""
    from travelrisk.core.rate_limit import limiter

    limiter.reset()
    yield


@pytest.fixture()
async def client(mock_db):  # noqa: ARG001 (mock_db must run first)
    """HTTPX async test client wired to the FastAPI app, no database."""
    from travelrisk.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def fake_db():
    return FakeDatabase()


@pytest.fixture()
async def db_client(fake_db, mock_db):  # noqa: ARG001
    """HTTPX async test client with `fake_db` injected as the database."""
    from travelrisk.core.database import get_db
    from travelrisk.main import app

    app.dependency_overrides[get_db] = lambda: fake_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
