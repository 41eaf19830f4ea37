"""
Tests for /api/v1/trips: saved trips and scheduled departures.
"""

from datetime import datetime, timezone

from bson import ObjectId

_TRIP = {
    "user_id": "user-1",
    "start_coordinates": {"lat": 51.5074, "lng": -0.1278},
    "end_coordinates": {"lat": 51.7520, "lng": -1.2577},
    "travel_time": 5400,
    "travel_distance": 92000,
    "travel_mode": "driving",
    "travel_type": "commute",
    "from_location": "London",
    "to_location": "Oxford",
}


async def _create(client, **overrides):
    r = await client.post("/api/v1/trips", json={**_TRIP, **overrides})
    assert r.status_code == 201, r.text
    return r.json()


class TestTripCrud:
    async def test_create(self, db_client):
        trip = await _create(db_client)
        assert trip["user_id"] == "user-1"
        assert trip["travel_mode"] == "driving"
        assert trip["notified"] is False

    async def test_invalid_mode_rejected(self, db_client):
        r = await db_client.post("/api/v1/trips", json={**_TRIP, "travel_mode": "flying"})
        assert r.status_code == 422

    async def test_negative_distance_rejected(self, db_client):
        r = await db_client.post("/api/v1/trips", json={**_TRIP, "travel_distance": -1})
        assert r.status_code == 422

    async def test_list_is_scoped_to_user(self, db_client):
        await _create(db_client)
        await _create(db_client)
        await _create(db_client, user_id="user-2")

        data = (await db_client.get("/api/v1/trips?user_id=user-1")).json()
        assert data["pagination"]["total"] == 2
        assert all(t["user_id"] == "user-1" for t in data["trips"])

    async def test_list_requires_user(self, db_client):
        assert (await db_client.get("/api/v1/trips")).status_code == 422

    async def test_update(self, db_client):
        trip = await _create(db_client)
        r = await db_client.put(f"/api/v1/trips/{trip['id']}", json={"travel_mode": "cycling"})
        assert r.status_code == 200
        assert r.json()["travel_mode"] == "cycling"
        assert r.json()["travel_type"] == "commute"

    async def test_moving_departure_rearms_alert(self, db_client, fake_db):
        trip = await _create(db_client)
        fake_db["trips"].docs[0]["notified"] = True

        r = await db_client.put(
            f"/api/v1/trips/{trip['id']}", json={"departure_time": "2026-05-01T07:45:00Z"}
        )
        data = r.json()
        assert data["notified"] is False
        assert data["cron_string"] == "45 7 1 5 *"

    async def test_delete(self, db_client):
        trip = await _create(db_client)
        assert (await db_client.delete(f"/api/v1/trips/{trip['id']}")).status_code == 204
        assert (await db_client.get(f"/api/v1/trips/{trip['id']}")).status_code == 404

    async def test_unknown_id_is_404(self, db_client):
        assert (await db_client.get(f"/api/v1/trips/{ObjectId()}")).status_code == 404

    async def test_no_database_is_503(self, client):
        assert (await client.get("/api/v1/trips?user_id=u")).status_code == 503


class TestScheduleTrip:
    _BODY = {"user_id": "user-1", "from": "London", "to": "Oxford", "date": "2026-06-15", "time": "8:05"}

    async def test_schedule_stores_departure_and_cron(self, db_client, fake_db):
        r = await db_client.post("/api/v1/trips/schedule", json=self._BODY)
        assert r.status_code == 201
        data = r.json()
        assert data["cron_string"] == "5 8 15 6 *"
        assert data["notified"] is False
        assert data["from_location"] == "London"

        stored = fake_db["trips"].docs[0]
        assert stored["departure_time"] == datetime(2026, 6, 15, 8, 5, tzinfo=timezone.utc)

    async def test_bad_time_rejected(self, db_client):
        r = await db_client.post("/api/v1/trips/schedule", json={**self._BODY, "time": "24:00"})
        assert r.status_code == 422

    async def test_bad_date_rejected(self, db_client):
        r = await db_client.post("/api/v1/trips/schedule", json={**self._BODY, "date": "2026-02-30"})
        assert r.status_code == 422

    async def test_missing_destination_rejected(self, db_client):
        body = {k: v for k, v in self._BODY.items() if k != "to"}
        assert (await db_client.post("/api/v1/trips/schedule", json=body)).status_code == 422
