"""
plan.py: Request / response schemas for POST /api/v1/plan.

The response carries everything the map needs for one planning action:
the route polyline, the corridor ring, the heat-layer points and the
aggregate score. `applied` is False when a newer plan for the same
session finished first and this result was discarded.
"""

from typing import Optional

from pydantic import BaseModel, Field

from travelrisk.models.geo import Coordinate, HeatmapPoint
from travelrisk.models.trip import TravelMode


class PlanTripRequest(BaseModel):
    origin: Coordinate
    destination: Coordinate
    travel_mode: TravelMode = TravelMode.DRIVING
    session_id: Optional[str] = Field(default=None, max_length=100)
    # Overrides settings.corridor_buffer_m for this request only
    buffer_m: Optional[float] = Field(default=None, gt=0, le=200_000)


class PlanTripResponse(BaseModel):
    token: int
    score: float
    sample_count: int
    heatmap_points: list[HeatmapPoint]
    corridor: list[Coordinate]
    route: list[Coordinate]
    applied: bool = True
