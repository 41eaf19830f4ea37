"""
trips.py: Saved trips and scheduled departures.

Routes:
  GET    /api/v1/trips?user_id=…     a user's trips (limit/offset, newest first)
  POST   /api/v1/trips               save a planned trip
  POST   /api/v1/trips/schedule      schedule a departure alert
  GET    /api/v1/trips/{id}          get one
  PUT    /api/v1/trips/{id}          partial update
  DELETE /api/v1/trips/{id}          delete

A scheduled trip stores its departure_time (UTC) with notified=false;
the alert checker (services/alerts.py) fires it once. The one-shot cron
expression is stored alongside for clients that schedule their own jobs.
"""

import logging
from datetime import datetime, time, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from travelrisk.core.database import get_db
from travelrisk.models.geo import Coordinate
from travelrisk.models.report import Pagination
from travelrisk.models.trip import (
    ScheduleTripRequest,
    TripCreate,
    TripListResponse,
    TripOut,
    TripUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/trips", tags=["trips"])


# ── Helpers ───────────────────────────────────────────────────────────────────

def _coords(raw: Optional[dict]) -> Optional[Coordinate]:
    return Coordinate(**raw) if raw else None


def _doc_to_trip(doc: dict) -> TripOut:
    return TripOut(
        id=str(doc["_id"]),
        user_id=doc["user_id"],
        start_coordinates=_coords(doc.get("start_coordinates")),
        end_coordinates=_coords(doc.get("end_coordinates")),
        travel_time=doc.get("travel_time"),
        travel_distance=doc.get("travel_distance"),
        travel_mode=doc.get("travel_mode"),
        travel_type=doc.get("travel_type"),
        from_location=doc.get("from_location"),
        to_location=doc.get("to_location"),
        departure_time=doc.get("departure_time"),
        cron_string=doc.get("cron_string"),
        notified=doc.get("notified", False),
        created_at=doc.get("created_at", datetime.now(tz=timezone.utc)),
    )


def _validate_oid(trip_id: str) -> ObjectId:
    try:
        return ObjectId(trip_id)
    except InvalidId:
        raise HTTPException(status_code=422, detail="Invalid trip ID format")


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def one_shot_cron(when: datetime) -> str:
    """Cron expression that matches `when` (minute precision) once a year."""
    return f"{when.minute} {when.hour} {when.day} {when.month} *"


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get("", response_model=TripListResponse)
async def list_trips(
    user_id: str = Query(..., min_length=1),
    limit:   int = Query(default=50, ge=1, le=100),
    offset:  int = Query(default=0, ge=0),
    db=Depends(get_db),
):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    query = {"user_id": user_id}
    total = await db["trips"].count_documents(query)
    cursor = db["trips"].find(query).sort("created_at", -1).skip(offset).limit(limit)

    trips = []
    async for doc in cursor:
        try:
            trips.append(_doc_to_trip(doc))
        except Exception as exc:
            logger.warning("Skipping malformed trip doc: %s", exc)

    return TripListResponse(
        trips=trips,
        pagination=Pagination(
            total=total, limit=limit, offset=offset, has_more=offset + limit < total
        ),
    )


@router.post("", response_model=TripOut, status_code=201)
async def create_trip(payload: TripCreate, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    doc = payload.model_dump(mode="json")
    # keep datetimes native so the alert checker can range-query them
    doc["departure_time"] = _as_utc(payload.departure_time) if payload.departure_time else None
    doc["notified"] = False
    doc["created_at"] = datetime.now(tz=timezone.utc)

    result = await db["trips"].insert_one(doc)
    doc["_id"] = result.inserted_id
    return _doc_to_trip(doc)


@router.post("/schedule", response_model=TripOut, status_code=201)
async def schedule_trip(payload: ScheduleTripRequest, db=Depends(get_db)):
    """Store a trip that triggers a departure alert at date + time (UTC)."""
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    hour, minute = (int(part) for part in payload.departure_clock.split(":"))
    departure = datetime.combine(
        payload.departure_date, time(hour, minute), tzinfo=timezone.utc
    )
    doc = {
        "user_id": payload.user_id,
        "from_location": payload.from_location,
        "to_location": payload.to_location,
        "departure_time": departure,
        "cron_string": one_shot_cron(departure),
        "notified": False,
        "created_at": datetime.now(tz=timezone.utc),
    }
    result = await db["trips"].insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("Trip %s scheduled for %s", result.inserted_id, departure.isoformat())
    return _doc_to_trip(doc)


@router.get("/{trip_id}", response_model=TripOut)
async def get_trip(trip_id: str, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    doc = await db["trips"].find_one({"_id": _validate_oid(trip_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Trip not found")
    return _doc_to_trip(doc)


@router.put("/{trip_id}", response_model=TripOut)
async def update_trip(trip_id: str, payload: TripUpdate, db=Depends(get_db)):
    """
    Partial update. Moving departure_time re-arms the departure alert and
    refreshes the cron expression.
    """
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    oid = _validate_oid(trip_id)
    if not await db["trips"].find_one({"_id": oid}):
        raise HTTPException(status_code=404, detail="Trip not found")

    changes = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if payload.departure_time is not None:
        departure = _as_utc(payload.departure_time)
        changes.update(
            departure_time=departure, cron_string=one_shot_cron(departure), notified=False
        )
    if changes:
        await db["trips"].update_one({"_id": oid}, {"$set": changes})
    return _doc_to_trip(await db["trips"].find_one({"_id": oid}))


@router.delete("/{trip_id}", status_code=204)
async def delete_trip(trip_id: str, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    result = await db["trips"].delete_one({"_id": _validate_oid(trip_id)})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Trip not found")
    return Response(status_code=204)
