"""
geo.py: Shared geographic value objects.

Coordinate is the one position type used by every model and service.
Stored in MongoDB as a plain {lat, lng} sub-document.
"""

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A WGS-84 position in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class HeatmapPoint(BaseModel):
    """One weighted point handed to the map's heat layer."""

    position: Coordinate
    weight: float
