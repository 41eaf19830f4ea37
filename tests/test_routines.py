"""
Tests for /api/v1/routines and the routine schema's day validation.
"""

import pytest
from bson import ObjectId
from pydantic import ValidationError

from travelrisk.models.routine import RoutineCreate

_ROUTINE = {
    "user_id": "user-1",
    "name": "School run",
    "start_location": "Home",
    "start_coordinates": {"lat": 51.5, "lng": -0.12},
    "end_location": "School",
    "end_coordinates": {"lat": 51.52, "lng": -0.1},
    "start_time": "08:15",
    "repeat_days": ["Monday", "wednesday", "FRIDAY"],
}


async def _create(client, **overrides):
    r = await client.post("/api/v1/routines", json={**_ROUTINE, **overrides})
    assert r.status_code == 201, r.text
    return r.json()


class TestRepeatDays:
    def test_lowercased_and_ordered(self):
        routine = RoutineCreate(**{**_ROUTINE, "repeat_days": ["friday", "Monday", "monday"]})
        assert routine.repeat_days == ["monday", "friday"]

    def test_unknown_day_rejected(self):
        with pytest.raises(ValidationError):
            RoutineCreate(**{**_ROUTINE, "repeat_days": ["funday"]})

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            RoutineCreate(**{**_ROUTINE, "repeat_days": []})

    @pytest.mark.parametrize("value", ["8:15", "23:59", "00:00"])
    def test_valid_times(self, value):
        assert RoutineCreate(**{**_ROUTINE, "start_time": value}).start_time == value

    @pytest.mark.parametrize("value", ["24:00", "8:60", "0815", "8.15"])
    def test_invalid_times(self, value):
        with pytest.raises(ValidationError):
            RoutineCreate(**{**_ROUTINE, "start_time": value})


class TestRoutineCrud:
    async def test_create_stores_lowercase_days(self, db_client):
        routine = await _create(db_client)
        assert routine["repeat_days"] == ["monday", "wednesday", "friday"]
        assert routine["last_alerted_on"] is None

    async def test_list(self, db_client):
        await _create(db_client)
        await _create(db_client, user_id="someone-else")
        data = (await db_client.get("/api/v1/routines?user_id=user-1")).json()
        assert data["total"] == 1
        assert data["limit"] == 50
        assert data["offset"] == 0
        assert data["routines"][0]["name"] == "School run"

    async def test_partial_update_validates_days(self, db_client):
        routine = await _create(db_client)
        r = await db_client.put(
            f"/api/v1/routines/{routine['id']}", json={"repeat_days": ["Sunday"]}
        )
        assert r.status_code == 200
        assert r.json()["repeat_days"] == ["sunday"]
        assert r.json()["start_time"] == "08:15"

        bad = await db_client.put(
            f"/api/v1/routines/{routine['id']}", json={"repeat_days": ["someday"]}
        )
        assert bad.status_code == 422

    async def test_get_and_delete(self, db_client):
        routine = await _create(db_client)
        assert (await db_client.get(f"/api/v1/routines/{routine['id']}")).status_code == 200
        assert (await db_client.delete(f"/api/v1/routines/{routine['id']}")).status_code == 204
        assert (await db_client.get(f"/api/v1/routines/{routine['id']}")).status_code == 404

    async def test_unknown_id_is_404(self, db_client):
        r = await db_client.put(f"/api/v1/routines/{ObjectId()}", json={"name": "x"})
        assert r.status_code == 404
