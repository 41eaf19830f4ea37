"""
DirectionsClient: route polylines from OSRM.

Two runtime modes (DIRECTIONS_MOCK_MODE):
  - MOCK (default): a straight line from origin to destination,
    interpolated every ~5 km. Deterministic and offline.
  - REAL: OSRM /route with full GeoJSON overview geometry.

OSRM takes coordinates as "lng,lat;lng,lat". The client converts to and
from the internal Coordinate type. Any failure raises UpstreamFetchError.
"""

import logging
import math

import httpx

from travelrisk.core.config import settings
from travelrisk.core.errors import UpstreamFetchError
from travelrisk.models.geo import Coordinate
from travelrisk.models.trip import TravelMode
from travelrisk.services.geo import haversine_distance_km

logger = logging.getLogger(__name__)

# OSRM profile names per travel mode
_PROFILES = {
    TravelMode.DRIVING: "driving",
    TravelMode.WALKING: "foot",
    TravelMode.CYCLING: "bike",
}

_MOCK_STEP_KM = 5.0
_MOCK_MAX_POINTS = 200


def straight_line(origin: Coordinate, destination: Coordinate) -> list[Coordinate]:
    """Linear interpolation between two points (at least 2 points)."""
    distance_km = haversine_distance_km(origin, destination)
    steps = min(_MOCK_MAX_POINTS - 1, max(1, math.ceil(distance_km / _MOCK_STEP_KM)))
    return [
        Coordinate(
            lat=origin.lat + (destination.lat - origin.lat) * i / steps,
            lng=origin.lng + (destination.lng - origin.lng) * i / steps,
        )
        for i in range(steps + 1)
    ]


def format_coordinates(coords: list[Coordinate]) -> str:
    return ";".join(f"{c.lng},{c.lat}" for c in coords)


class DirectionsClient:
    """Use the module-level `directions_client` singleton."""

    def __init__(self) -> None:
        self.mock_mode = settings.directions_mock_mode
        self.base_url = settings.osrm_base_url.rstrip("/")
        self.timeout = settings.http_timeout_s

    async def route(
        self,
        origin: Coordinate,
        destination: Coordinate,
        travel_mode: TravelMode = TravelMode.DRIVING,
    ) -> list[Coordinate]:
        """Ordered polyline from origin to destination."""
        if self.mock_mode:
            return straight_line(origin, destination)

        profile = _PROFILES[travel_mode]
        url = f"{self.base_url}/route/v1/{profile}/{format_coordinates([origin, destination])}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    url, params={"overview": "full", "geometries": "geojson"}
                )
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("OSRM request failed: %s", exc)
            raise UpstreamFetchError("directions", str(exc)) from exc

        if not isinstance(data, dict):
            logger.error("OSRM returned a non-object body")
            raise UpstreamFetchError("directions", "malformed response")

        if data.get("code") != "Ok" or not data.get("routes"):
            message = data.get("message", data.get("code", "Unknown error"))
            logger.error("OSRM error: %s", message)
            raise UpstreamFetchError("directions", message)

        try:
            geometry = data["routes"][0]["geometry"]["coordinates"]
            # Validation of the polyline is left to the corridor builder.
            return [Coordinate.model_construct(lat=lat, lng=lng) for lng, lat in geometry]
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.error("OSRM route has no usable geometry: %r", exc)
            raise UpstreamFetchError("directions", "malformed route geometry") from exc


directions_client = DirectionsClient()
