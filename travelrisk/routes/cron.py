"""
cron.py: Manual trigger for the departure / routine checker.

  GET /api/v1/cron/check-trips: run one check pass now

The same pass runs in the background every ALERT_POLL_INTERVAL_S seconds;
this route lets an external scheduler drive it instead (set the interval
to 0 to disable the built-in loop).
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from travelrisk.core.database import get_db
from travelrisk.models.alert import CheckTripsResponse
from travelrisk.services.alerts import check_departures

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/cron", tags=["cron"])


@router.get("/check-trips", response_model=CheckTripsResponse)
async def check_trips(db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    try:
        return await check_departures(db)
    except Exception as exc:
        logger.error("Departure check failed: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to process trips")
