"""
routines.py: Recurring trip templates.

Routes:
  GET    /api/v1/routines?user_id=…     a user's routines
  POST   /api/v1/routines               create
  GET    /api/v1/routines/{id}          get one
  PUT    /api/v1/routines/{id}          partial update
  DELETE /api/v1/routines/{id}          delete

repeat_days are validated and stored lowercase in calendar order
(see models/routine.py).
"""

import logging
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from travelrisk.core.database import get_db
from travelrisk.models.geo import Coordinate
from travelrisk.models.routine import (
    RoutineCreate,
    RoutineListResponse,
    RoutineOut,
    RoutineUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/routines", tags=["routines"])


def _doc_to_routine(doc: dict) -> RoutineOut:
    return RoutineOut(
        id=str(doc["_id"]),
        user_id=doc["user_id"],
        name=doc["name"],
        start_location=doc["start_location"],
        start_coordinates=Coordinate(**doc["start_coordinates"]),
        end_location=doc["end_location"],
        end_coordinates=Coordinate(**doc["end_coordinates"]),
        start_time=doc["start_time"],
        repeat_days=doc.get("repeat_days", []),
        last_alerted_on=doc.get("last_alerted_on"),
        created_at=doc.get("created_at", datetime.now(tz=timezone.utc)),
    )


def _validate_oid(routine_id: str) -> ObjectId:
    try:
        return ObjectId(routine_id)
    except InvalidId:
        raise HTTPException(status_code=422, detail="Invalid routine ID format")


@router.get("", response_model=RoutineListResponse)
async def list_routines(
    user_id: str = Query(..., min_length=1),
    limit:   int = Query(default=50, ge=1, le=100),
    offset:  int = Query(default=0, ge=0),
    db=Depends(get_db),
):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    query = {"user_id": user_id}
    total = await db["routines"].count_documents(query)
    cursor = db["routines"].find(query).sort("created_at", -1).skip(offset).limit(limit)

    routines = []
    async for doc in cursor:
        try:
            routines.append(_doc_to_routine(doc))
        except Exception as exc:
            logger.warning("Skipping malformed routine doc: %s", exc)

    return RoutineListResponse(routines=routines, total=total, limit=limit, offset=offset)


@router.post("", response_model=RoutineOut, status_code=201)
async def create_routine(payload: RoutineCreate, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    doc = {
        **payload.model_dump(),
        "last_alerted_on": None,
        "created_at": datetime.now(tz=timezone.utc),
    }
    result = await db["routines"].insert_one(doc)
    doc["_id"] = result.inserted_id
    return _doc_to_routine(doc)


@router.get("/{routine_id}", response_model=RoutineOut)
async def get_routine(routine_id: str, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    doc = await db["routines"].find_one({"_id": _validate_oid(routine_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Routine not found")
    return _doc_to_routine(doc)


@router.put("/{routine_id}", response_model=RoutineOut)
async def update_routine(routine_id: str, payload: RoutineUpdate, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    oid = _validate_oid(routine_id)
    if not await db["routines"].find_one({"_id": oid}):
        raise HTTPException(status_code=404, detail="Routine not found")

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if changes:
        await db["routines"].update_one({"_id": oid}, {"$set": changes})
    return _doc_to_routine(await db["routines"].find_one({"_id": oid}))


@router.delete("/{routine_id}", status_code=204)
async def delete_routine(routine_id: str, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    result = await db["routines"].delete_one({"_id": _validate_oid(routine_id)})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Routine not found")
    return Response(status_code=204)
