"""
routine.py: Pydantic schemas for recurring trip templates.

A routine fires a reminder alert when the wall clock (UTC, minute
precision) equals start_time on one of its repeat_days.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from travelrisk.models.geo import Coordinate
from travelrisk.models.trip import TIME_PATTERN

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _normalise_days(days: Optional[list[str]]) -> Optional[list[str]]:
    if days is None:
        return None
    lowered = [d.lower() for d in days]
    invalid = [d for d in lowered if d not in WEEKDAYS]
    if invalid:
        raise ValueError(f"repeat_days must be valid day names, got {invalid}")
    # de-duplicate, keep calendar order
    return [d for d in WEEKDAYS if d in lowered]


class RoutineCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    start_location: str = Field(..., min_length=1)
    start_coordinates: Coordinate
    end_location: str = Field(..., min_length=1)
    end_coordinates: Coordinate
    start_time: str = Field(..., pattern=TIME_PATTERN)
    repeat_days: list[str] = Field(..., min_length=1)

    @field_validator("repeat_days")
    @classmethod
    def check_repeat_days(cls, v):
        return _normalise_days(v)


class RoutineUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    start_location: Optional[str] = Field(default=None, min_length=1)
    start_coordinates: Optional[Coordinate] = None
    end_location: Optional[str] = Field(default=None, min_length=1)
    end_coordinates: Optional[Coordinate] = None
    start_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    repeat_days: Optional[list[str]] = Field(default=None, min_length=1)

    @field_validator("repeat_days")
    @classmethod
    def check_repeat_days(cls, v):
        return _normalise_days(v)


class RoutineOut(BaseModel):
    id: str
    user_id: str
    name: str
    start_location: str
    start_coordinates: Coordinate
    end_location: str
    end_coordinates: Coordinate
    start_time: str
    repeat_days: list[str]
    last_alerted_on: Optional[str] = None   # ISO date of the last reminder
    created_at: datetime


class RoutineListResponse(BaseModel):
    routines: list[RoutineOut]
    total: int
    limit: int
    offset: int
