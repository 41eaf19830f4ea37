"""
alerts.py: Departure and routine reminders.

check_departures() is one pass of the checker. It is called by
GET /api/v1/cron/check-trips and, every ALERT_POLL_INTERVAL_S seconds, by
the background loop started in the app lifespan.

Trips:    notified=false and departure_time <= now → notified=true, then
          one alert. Overlapping passes alert each trip once.
Routines: start_time == now (minute precision, UTC) on one of the
          repeat_days → one alert per routine per day (last_alerted_on).

A pass that dies between the claim and the insert loses that alert
rather than sending it twice.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from travelrisk.core import database as db_module
from travelrisk.models.alert import CheckTripsResponse
from travelrisk.models.routine import WEEKDAYS

logger = logging.getLogger(__name__)


def _place(name: Optional[str], coords: Optional[dict]) -> str:
    if name:
        return name
    if coords:
        return f"{coords['lat']:.4f}, {coords['lng']:.4f}"
    return "unknown location"


def departure_message(trip: dict) -> str:
    origin = _place(trip.get("from_location"), trip.get("start_coordinates"))
    destination = _place(trip.get("to_location"), trip.get("end_coordinates"))
    return f"Time to depart for your trip from {origin} to {destination}!"


def routine_message(routine: dict) -> str:
    return (
        f"Routine '{routine['name']}' starts now: "
        f"{routine['start_location']} → {routine['end_location']}"
    )


def _clock(value: str) -> tuple[int, int]:
    hour, minute = value.split(":")
    return int(hour), int(minute)


def routines_due(routines: list[dict], now: datetime) -> list[dict]:
    """Routines whose start_time is this minute on today's weekday."""
    weekday = WEEKDAYS[now.weekday()]
    due = []
    for routine in routines:
        try:
            clock = _clock(routine["start_time"])
        except (KeyError, ValueError) as exc:
            logger.warning("Skipping routine %s with bad start_time: %s", routine.get("_id"), exc)
            continue
        if weekday in routine.get("repeat_days", []) and clock == (now.hour, now.minute):
            due.append(routine)
    return due


def _alert_doc(user_id: str, message: str, now: datetime, **refs) -> dict:
    return {
        "user_id": user_id,
        "message": message,
        "is_read": False,
        "created_at": now,
        **refs,
    }


async def check_departures(db, now: Optional[datetime] = None) -> CheckTripsResponse:
    """Create every alert that is due at `now` (default: current UTC time)."""
    now = now or datetime.now(tz=timezone.utc)

    # Each trip / routine is claimed with a conditional write before its
    # alert is inserted; a concurrent pass that loses the claim skips it.
    candidates = await db["trips"].find(
        {"notified": False, "departure_time": {"$lte": now}}
    ).to_list(length=None)
    trips = 0
    for trip in candidates:
        claimed = await db["trips"].find_one_and_update(
            {"_id": trip["_id"], "notified": False},
            {"$set": {"notified": True}},
        )
        if claimed is None:
            continue
        await db["alerts"].insert_one(
            _alert_doc(trip["user_id"], departure_message(trip), now, trip_id=str(trip["_id"]))
        )
        trips += 1

    today = now.date().isoformat()
    candidates = await db["routines"].find(
        {"repeat_days": WEEKDAYS[now.weekday()], "last_alerted_on": {"$ne": today}}
    ).to_list(length=None)
    routines = 0
    for routine in routines_due(candidates, now):
        result = await db["routines"].update_one(
            {"_id": routine["_id"], "last_alerted_on": {"$ne": today}},
            {"$set": {"last_alerted_on": today}},
        )
        if result.modified_count != 1:
            continue
        await db["alerts"].insert_one(
            _alert_doc(
                routine["user_id"], routine_message(routine), now, routine_id=str(routine["_id"])
            )
        )
        routines += 1

    if trips or routines:
        logger.info("Created %d departure and %d routine alerts", trips, routines)
    return CheckTripsResponse(alerted=trips + routines, trips=trips, routines=routines)


async def run_alert_loop(interval_s: float) -> None:
    """
    Run check_departures() forever, every `interval_s` seconds.

    Skips a tick while the database is unavailable. Errors are logged and
    the loop carries on; cancellation stops it.
    """
    logger.info("Alert checker running every %.0fs", interval_s)
    while True:
        db = db_module.get_db()
        if db is not None:
            try:
                await check_departures(db)
            except Exception as exc:
                logger.error("Alert check failed: %s", exc)
        await asyncio.sleep(interval_s)
