"""
risks.py: Curated risk points and weather risk markers.

Routes:
  GET    /api/v1/risks             list all stored risks
  POST   /api/v1/risks             create a risk
  GET    /api/v1/risks/markers     weather risk markers around a centre
  GET    /api/v1/risks/{id}        get one
  PUT    /api/v1/risks/{id}        partial update
  DELETE /api/v1/risks/{id}        delete

/markers samples random positions within radius_km of the centre and
scores each with the weather formula. It is the demo marker source used
by the map when no route has been planned yet.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from travelrisk.core.config import settings
from travelrisk.core.database import get_db
from travelrisk.core.errors import UpstreamFetchError
from travelrisk.models.geo import Coordinate
from travelrisk.models.risk import RiskCreate, RiskMarker, RiskOut, RiskUpdate
from travelrisk.services.geo import generate_random_positions
from travelrisk.services.weather import weather_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/risks", tags=["risks"])


# ── Helpers ───────────────────────────────────────────────────────────────────

def _doc_to_risk(doc: dict) -> RiskOut:
    return RiskOut(
        id=str(doc["_id"]),
        coordinates=Coordinate(**doc["coordinates"]),
        risk_level=doc["risk_level"],
        description=doc.get("description"),
        created_at=doc.get("created_at", datetime.now(tz=timezone.utc)),
    )


def _validate_oid(risk_id: str) -> ObjectId:
    try:
        return ObjectId(risk_id)
    except InvalidId:
        raise HTTPException(status_code=422, detail="Invalid risk ID format")


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get("", response_model=list[RiskOut])
async def list_risks(db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    risks = []
    async for doc in db["risks"].find({}).sort("created_at", -1):
        try:
            risks.append(_doc_to_risk(doc))
        except Exception as exc:
            logger.warning("Skipping malformed risk doc: %s", exc)
    return risks


@router.post("", response_model=RiskOut, status_code=201)
async def create_risk(payload: RiskCreate, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    doc = {**payload.model_dump(), "created_at": datetime.now(tz=timezone.utc)}
    result = await db["risks"].insert_one(doc)
    doc["_id"] = result.inserted_id
    return _doc_to_risk(doc)


@router.get("/markers", response_model=list[RiskMarker])
async def risk_markers(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: Optional[float] = Query(default=None, gt=0, le=500),
    count: Optional[int] = Query(default=None, ge=1, le=200),
):
    """Weather risk at `count` random positions within `radius_km` of (lat, lng)."""
    positions = generate_random_positions(
        count or settings.marker_sample_count,
        Coordinate(lat=lat, lng=lng),
        radius_km or settings.marker_radius_km,
    )
    try:
        return await weather_client.markers_at(positions)
    except UpstreamFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


@router.get("/{risk_id}", response_model=RiskOut)
async def get_risk(risk_id: str, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    doc = await db["risks"].find_one({"_id": _validate_oid(risk_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Risk not found")
    return _doc_to_risk(doc)


@router.put("/{risk_id}", response_model=RiskOut)
async def update_risk(risk_id: str, payload: RiskUpdate, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    oid = _validate_oid(risk_id)
    if not await db["risks"].find_one({"_id": oid}):
        raise HTTPException(status_code=404, detail="Risk not found")

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if changes:
        await db["risks"].update_one({"_id": oid}, {"$set": changes})
    return _doc_to_risk(await db["risks"].find_one({"_id": oid}))


@router.delete("/{risk_id}", status_code=204)
async def delete_risk(risk_id: str, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    result = await db["risks"].delete_one({"_id": _validate_oid(risk_id)})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Risk not found")
    return Response(status_code=204)
