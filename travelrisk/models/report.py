"""
report.py: Pydantic schemas for user-submitted hazard reports.

A report is either numeric (risk_level 1–5) or qualitative (risk_type).
Exactly one of the two must be set; the planner turns the first into a
level-based weight and the second into the configured default weight.

ReportCreate         what the client sends
ReportUpdate         partial PUT body
ReportOut            stored report retrieved from DB
ReportListResponse   paginated list
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from travelrisk.models.geo import Coordinate


class RiskType(str, Enum):
    SNOW = "SNOW"
    HAIL = "HAIL"
    RAIN = "RAIN"
    FOG = "FOG"
    ICE = "ICE"
    WIND = "WIND"
    SANDY = "SANDY"
    BAD_GRAVEL = "BAD_GRAVEL"
    MUD = "MUD"
    ROCK = "ROCK"
    DEBRIS = "DEBRIS"
    POTHOLE = "POTHOLE"
    ROADWORK = "ROADWORK"
    POLICE = "POLICE"
    CLOSED_ROAD = "CLOSED_ROAD"


# ── Request ───────────────────────────────────────────────────────────────────

class ReportCreate(BaseModel):
    """Payload for POST /api/v1/reports."""
    coordinates: Coordinate
    risk_level: Optional[int] = Field(default=None, ge=1, le=5)
    risk_type: Optional[RiskType] = None
    description: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def check_one_severity(self) -> "ReportCreate":
        if (self.risk_level is None) == (self.risk_type is None):
            raise ValueError("exactly one of risk_level or risk_type is required")
        return self


class ReportUpdate(BaseModel):
    coordinates: Optional[Coordinate] = None
    risk_level: Optional[int] = Field(default=None, ge=1, le=5)
    risk_type: Optional[RiskType] = None
    description: Optional[str] = Field(default=None, max_length=2000)


# ── Stored report ─────────────────────────────────────────────────────────────

class ReportOut(BaseModel):
    id: str
    coordinates: Coordinate
    risk_level: Optional[int] = None
    risk_type: Optional[RiskType] = None
    description: Optional[str] = None
    created_at: datetime


# ── List response ─────────────────────────────────────────────────────────────

class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ReportListResponse(BaseModel):
    reports: list[ReportOut]
    pagination: Pagination
