"""
trip.py: Pydantic schemas for planned and scheduled trips.

TripCreate            POST /api/v1/trips
TripUpdate            PUT  /api/v1/trips/{id} (partial)
ScheduleTripRequest   POST /api/v1/trips/schedule (departure alert)
TripOut               stored trip
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from travelrisk.models.geo import Coordinate
from travelrisk.models.report import Pagination

# HH:MM, 24-hour clock, hour may omit the leading zero
TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


class TravelMode(str, Enum):
    DRIVING = "driving"
    WALKING = "walking"
    CYCLING = "cycling"


class TripCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    start_coordinates: Coordinate
    end_coordinates: Coordinate
    travel_time: float = Field(..., ge=0)       # seconds
    travel_distance: float = Field(..., ge=0)   # metres
    travel_mode: TravelMode
    travel_type: str = Field(..., min_length=1, max_length=50)   # e.g. "commute"
    from_location: Optional[str] = None
    to_location: Optional[str] = None
    departure_time: Optional[datetime] = None


class TripUpdate(BaseModel):
    start_coordinates: Optional[Coordinate] = None
    end_coordinates: Optional[Coordinate] = None
    travel_time: Optional[float] = Field(default=None, ge=0)
    travel_distance: Optional[float] = Field(default=None, ge=0)
    travel_mode: Optional[TravelMode] = None
    travel_type: Optional[str] = Field(default=None, min_length=1, max_length=50)
    departure_time: Optional[datetime] = None


class ScheduleTripRequest(BaseModel):
    """Departure date and time are interpreted as UTC."""
    user_id: str = Field(..., min_length=1)
    from_location: str = Field(..., min_length=1, alias="from")
    to_location: str = Field(..., min_length=1, alias="to")
    departure_date: date = Field(..., alias="date")
    departure_clock: str = Field(..., alias="time", pattern=TIME_PATTERN)

    model_config = {"populate_by_name": True}


class TripOut(BaseModel):
    id: str
    user_id: str
    start_coordinates: Optional[Coordinate] = None
    end_coordinates: Optional[Coordinate] = None
    travel_time: Optional[float] = None
    travel_distance: Optional[float] = None
    travel_mode: Optional[TravelMode] = None
    travel_type: Optional[str] = None
    from_location: Optional[str] = None
    to_location: Optional[str] = None
    departure_time: Optional[datetime] = None
    cron_string: Optional[str] = None
    notified: bool = False
    created_at: datetime


class TripListResponse(BaseModel):
    trips: list[TripOut]
    pagination: Pagination
