"""
risk.py: Pydantic schemas for weather-derived risks.

RiskMarker: a geolocated numeric hazard score (0–100 nominal) produced
    by the weather formula; never persisted.
RiskCreate / RiskUpdate / RiskOut: curated risk points stored in the
    `risks` collection with a 1–5 level.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from travelrisk.models.geo import Coordinate


class RiskMarker(BaseModel):
    """Weather risk at a position. `risk` is unitless and not clamped."""

    position: Coordinate
    risk: float


class RiskCreate(BaseModel):
    """Payload for POST /api/v1/risks."""
    coordinates: Coordinate
    risk_level: int = Field(..., ge=1, le=5)
    description: Optional[str] = Field(default=None, max_length=2000)


class RiskUpdate(BaseModel):
    """Partial update for PUT /api/v1/risks/{id}."""
    coordinates: Optional[Coordinate] = None
    risk_level: Optional[int] = Field(default=None, ge=1, le=5)
    description: Optional[str] = Field(default=None, max_length=2000)


class RiskOut(BaseModel):
    id: str
    coordinates: Coordinate
    risk_level: int
    description: Optional[str] = None
    created_at: datetime
