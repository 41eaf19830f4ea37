"""
Tests for the /api/v1/health endpoint and the API root.

All tests run without a live MongoDB (db is mocked as disconnected in conftest).
"""

from unittest.mock import AsyncMock, MagicMock, patch


async def test_health_returns_200(client):
    """Health endpoint must always return 200 if the API process is alive."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200


async def test_health_response_schema(client):
    data = (await client.get("/api/v1/health")).json()

    assert data["status"] == "ok"
    assert data["version"] == "0.1.0"
    assert data["environment"] == "test"


async def test_health_disconnected_when_no_db(client):
    data = (await client.get("/api/v1/health")).json()
    assert data["database"] == "disconnected"


async def test_health_connected_when_ping_succeeds(client):
    import travelrisk.core.database as db_module

    fake_client = MagicMock()
    fake_client.admin.command = AsyncMock(return_value={"ok": 1})
    db_module.db_client.client = fake_client

    data = (await client.get("/api/v1/health")).json()
    assert data["database"] == "connected"


async def test_health_disconnected_when_ping_fails(client):
    import travelrisk.core.database as db_module

    fake_client = MagicMock()
    fake_client.admin.command = AsyncMock(side_effect=RuntimeError("timeout"))
    db_module.db_client.client = fake_client

    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["database"] == "disconnected"


async def test_root_endpoint(client):
    data = (await client.get("/")).json()
    assert data["name"] == "TravelRisk API"
    assert data["status"] == "running"


async def test_health_reports_mock_upstreams(client):
    # conftest runs every collaborator in mock mode
    data = (await client.get("/api/v1/health")).json()
    assert data["upstreams"] == {"directions": "mock", "weather": "mock", "ai": "mock"}


async def test_health_reports_live_upstream(client):
    from travelrisk.services.directions import directions_client

    with patch.object(directions_client, "mock_mode", False):
        data = (await client.get("/api/v1/health")).json()
    assert data["upstreams"]["directions"] == "live"


class TestDatabaseSetup:
    async def test_ensure_indexes_creates_each_index(self):
        from travelrisk.core.database import INDEXES, ensure_indexes

        db = MagicMock()
        db.__getitem__.return_value.create_index = AsyncMock()

        await ensure_indexes(db)

        create_index = db.__getitem__.return_value.create_index
        assert create_index.await_count == len(INDEXES)
        called = [c.args[0] for c in db.__getitem__.call_args_list]
        assert called == [name for name, _ in INDEXES]

    async def test_failed_ping_leaves_api_without_database(self):
        import travelrisk.core.database as db_module

        motor = MagicMock()
        motor.return_value.admin.command = AsyncMock(side_effect=RuntimeError("no server"))
        with patch.object(db_module, "AsyncIOMotorClient", motor):
            await db_module.connect_to_mongo()

        assert db_module.db_client.client is None
        assert db_module.get_db() is None

    def test_redact_uri_hides_credentials(self):
        from travelrisk.core.database import _redact_uri

        assert _redact_uri("mongodb://root:secret@db:27017/x") == "mongodb://<redacted>@db:27017/x"
