"""
alert.py: In-app alerts created by the departure / routine checker.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AlertOut(BaseModel):
    id: str
    user_id: str
    message: str
    is_read: bool = False
    trip_id: Optional[str] = None
    routine_id: Optional[str] = None
    created_at: datetime


class CheckTripsResponse(BaseModel):
    """Response of GET /api/v1/cron/check-trips."""
    alerted: int
    trips: int
    routines: int
