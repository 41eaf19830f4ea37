"""
alerts.py: In-app alerts created by the departure / routine checker.

Routes:
  GET    /api/v1/alerts?user_id=…[&since=…]    unread alerts, oldest first
  PATCH  /api/v1/alerts/{id}/read              mark one alert read
  DELETE /api/v1/alerts/{id}                   delete one alert
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from travelrisk.core.database import get_db
from travelrisk.models.alert import AlertOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/alerts", tags=["alerts"])


def _doc_to_alert(doc: dict) -> AlertOut:
    return AlertOut(
        id=str(doc["_id"]),
        user_id=doc["user_id"],
        message=doc["message"],
        is_read=doc.get("is_read", False),
        trip_id=doc.get("trip_id"),
        routine_id=doc.get("routine_id"),
        created_at=doc.get("created_at", datetime.now(tz=timezone.utc)),
    )


def _validate_oid(alert_id: str) -> ObjectId:
    try:
        return ObjectId(alert_id)
    except InvalidId:
        raise HTTPException(status_code=422, detail="Invalid alert ID format")


@router.get("", response_model=list[AlertOut])
async def list_alerts(
    user_id: str = Query(..., min_length=1),
    since: Optional[datetime] = Query(default=None),
    db=Depends(get_db),
):
    """Unread alerts for a user, oldest first. `since` keeps only newer ones."""
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    query: dict = {"user_id": user_id, "is_read": False}
    if since is not None:
        if since.tzinfo is None:
            since = since.replace(tzinfo=timezone.utc)
        query["created_at"] = {"$gt": since}

    alerts = []
    async for doc in db["alerts"].find(query).sort("created_at", 1):
        try:
            alerts.append(_doc_to_alert(doc))
        except Exception as exc:
            logger.warning("Skipping malformed alert doc: %s", exc)
    return alerts


@router.patch("/{alert_id}/read", response_model=AlertOut)
async def mark_read(alert_id: str, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    oid = _validate_oid(alert_id)
    result = await db["alerts"].update_one({"_id": oid}, {"$set": {"is_read": True}})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Alert not found")
    return _doc_to_alert(await db["alerts"].find_one({"_id": oid}))


@router.delete("/{alert_id}", status_code=204)
async def delete_alert(alert_id: str, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    result = await db["alerts"].delete_one({"_id": _validate_oid(alert_id)})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Alert not found")
    return Response(status_code=204)
