"""
plan.py: Route-corridor risk scoring.

  POST /api/v1/plan: plan a trip and score the hazards along it

Body: {origin, destination, travel_mode?, session_id?, buffer_m?}.
Clients that send a session_id get stale-result protection: if they
start a second plan before the first finishes, the first comes back
with applied=false and must not be drawn.

Errors are raised as domain exceptions and mapped in main.py:
invalid route → 422, directions/weather/report failure → 502.
"""

import logging

from fastapi import APIRouter, Depends, Request

from travelrisk.core.database import get_db
from travelrisk.core.rate_limit import PLAN_RATE_LIMIT, limiter
from travelrisk.models.plan import PlanTripRequest, PlanTripResponse
from travelrisk.services.planner import PlanningSessionStore, plan_trip

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/plan", tags=["plan"])

# One display state per client session, kept for the life of the process
session_store = PlanningSessionStore()


@router.post("", response_model=PlanTripResponse)
@limiter.limit(PLAN_RATE_LIMIT)
async def plan(request: Request, payload: PlanTripRequest, db=Depends(get_db)):
    session = session_store.get(payload.session_id)
    return await plan_trip(payload, session, db)
