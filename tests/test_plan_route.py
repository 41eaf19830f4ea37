"""
Tests for POST /api/v1/plan: HTTP mapping of the planning pipeline.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from travelrisk.core.errors import UpstreamFetchError

LONDON = {"lat": 51.5074, "lng": -0.1278}
OXFORD = {"lat": 51.7520, "lng": -1.2577}


@pytest.fixture()
async def seeded(fake_db):
    await fake_db["reports"].insert_one(
        {
            "coordinates": {"lat": 51.6, "lng": -0.7},
            "risk_level": 3,
            "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        }
    )
    return fake_db


class TestPlanRoute:
    async def test_plan_returns_200(self, db_client, seeded):
        r = await db_client.post("/api/v1/plan", json={"origin": LONDON, "destination": OXFORD})
        assert r.status_code == 200

    async def test_response_shape(self, db_client, seeded):
        data = (
            await db_client.post("/api/v1/plan", json={"origin": LONDON, "destination": OXFORD})
        ).json()
        for key in ("token", "score", "sample_count", "heatmap_points", "corridor", "route", "applied"):
            assert key in data
        assert data["applied"] is True
        assert data["corridor"][0] == data["corridor"][-1]
        assert data["route"][0] == LONDON
        point = data["heatmap_points"][0]
        assert set(point) == {"position", "weight"}

    async def test_session_tokens_increase(self, db_client, seeded):
        body = {"origin": LONDON, "destination": OXFORD, "session_id": "map-1"}
        first = (await db_client.post("/api/v1/plan", json=body)).json()
        second = (await db_client.post("/api/v1/plan", json=body)).json()
        assert second["token"] == first["token"] + 1

    async def test_same_endpoints_is_422(self, db_client, seeded):
        r = await db_client.post("/api/v1/plan", json={"origin": LONDON, "destination": LONDON})
        assert r.status_code == 422
        assert r.json()["error"].startswith("Unable to plan trip:")

    async def test_out_of_range_coordinate_is_422(self, db_client):
        r = await db_client.post(
            "/api/v1/plan", json={"origin": {"lat": 91, "lng": 0}, "destination": OXFORD}
        )
        assert r.status_code == 422

    async def test_non_positive_buffer_is_422(self, db_client):
        r = await db_client.post(
            "/api/v1/plan", json={"origin": LONDON, "destination": OXFORD, "buffer_m": 0}
        )
        assert r.status_code == 422

    async def test_no_database_is_502(self, client):
        r = await client.post("/api/v1/plan", json={"origin": LONDON, "destination": OXFORD})
        assert r.status_code == 502
        assert r.json() == {"error": "Failed to plan trip"}

    async def test_directions_failure_is_502(self, db_client):
        from travelrisk.services.directions import directions_client

        failing = AsyncMock(side_effect=UpstreamFetchError("directions", "NoRoute"))
        with patch.object(directions_client, "route", failing):
            r = await db_client.post(
                "/api/v1/plan", json={"origin": LONDON, "destination": OXFORD}
            )
        assert r.status_code == 502

    async def test_weather_failure_is_502(self, db_client):
        from travelrisk.services.weather import weather_client

        failing = AsyncMock(side_effect=UpstreamFetchError("weather", "HTTP 500"))
        with patch.object(weather_client, "markers_at", failing):
            r = await db_client.post(
                "/api/v1/plan", json={"origin": LONDON, "destination": OXFORD}
            )
        assert r.status_code == 502
