"""
corridor.py: Buffered polygon around a route, and the point-in-corridor
filter.

The route is projected into an azimuthal-equidistant plane centred on
the route (metres), buffered there with shapely, and the ring is
projected back to WGS-84 for display. Containment is tested in the same
metric plane so the buffer width is honoured in metres.

Validation happens before any geometry call: fewer than 2 points,
non-finite or out-of-range coordinates, a zero-length route or a
non-positive width raise InvalidRouteError.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Sequence, TypeVar

from pyproj import Transformer
from shapely.geometry import LineString, Point, Polygon
from shapely.prepared import PreparedGeometry, prep

from travelrisk.core.errors import InvalidRouteError
from travelrisk.models.geo import Coordinate

logger = logging.getLogger(__name__)

# Arc segments per quarter circle at route ends and bends
_QUAD_SEGS = 16

T = TypeVar("T")


@dataclass(frozen=True)
class RouteCorridor:
    route: tuple[Coordinate, ...]
    buffer_m: float
    ring: tuple[Coordinate, ...]          # closed: first == last
    _polygon: PreparedGeometry = field(repr=False, compare=False)
    _to_plane: Transformer = field(repr=False, compare=False)

    def contains(self, position: Coordinate) -> bool:
        x, y = self._to_plane.transform(position.lng, position.lat)
        return self._polygon.contains(Point(x, y))


def validate_route(points: Sequence[Coordinate]) -> list[Coordinate]:
    """Return the route with consecutive duplicates dropped, or raise."""
    if len(points) < 2:
        raise InvalidRouteError(f"route needs at least 2 points, got {len(points)}")

    cleaned: list[Coordinate] = []
    for i, p in enumerate(points):
        if not (math.isfinite(p.lat) and math.isfinite(p.lng)):
            raise InvalidRouteError(f"route point {i} is not a finite coordinate")
        if not (-90 <= p.lat <= 90 and -180 <= p.lng <= 180):
            raise InvalidRouteError(f"route point {i} is out of range")
        if cleaned and cleaned[-1].lat == p.lat and cleaned[-1].lng == p.lng:
            continue
        cleaned.append(p)

    if len(cleaned) < 2:
        raise InvalidRouteError("route has zero length")
    return cleaned


def _aeqd_transformers(route: Sequence[Coordinate]) -> tuple[Transformer, Transformer]:
    lats = [p.lat for p in route]
    lngs = [p.lng for p in route]
    lat_0 = (min(lats) + max(lats)) / 2.0
    lon_0 = (min(lngs) + max(lngs)) / 2.0
    aeqd = (
        f"+proj=aeqd +lat_0={lat_0:.6f} +lon_0={lon_0:.6f} "
        "+x_0=0 +y_0=0 +datum=WGS84 +units=m +no_defs"
    )
    forward = Transformer.from_crs("EPSG:4326", aeqd, always_xy=True)
    inverse = Transformer.from_crs(aeqd, "EPSG:4326", always_xy=True)
    return forward, inverse


def build_corridor(points: Sequence[Coordinate], buffer_m: float) -> RouteCorridor:
    """Buffer the route polyline by `buffer_m` metres on each side."""
    if not (math.isfinite(buffer_m) and buffer_m > 0):
        raise InvalidRouteError(f"buffer width must be positive, got {buffer_m}")
    route = validate_route(points)

    forward, inverse = _aeqd_transformers(route)
    xs, ys = forward.transform([p.lng for p in route], [p.lat for p in route])
    line = LineString(list(zip(xs, ys)))
    if line.length == 0:
        raise InvalidRouteError("route has zero length")

    polygon: Polygon = line.buffer(buffer_m, quad_segs=_QUAD_SEGS)
    ring_x, ring_y = polygon.exterior.coords.xy
    lngs, lats = inverse.transform(list(ring_x), list(ring_y))
    ring = tuple(Coordinate.model_construct(lat=lat, lng=lng) for lng, lat in zip(lngs, lats))

    logger.debug(
        "Corridor built: %d route points, %.0f m buffer, %d ring vertices",
        len(route), buffer_m, len(ring),
    )
    return RouteCorridor(
        route=tuple(route),
        buffer_m=buffer_m,
        ring=ring,
        _polygon=prep(polygon),
        _to_plane=forward,
    )


def filter_in_corridor(corridor: RouteCorridor, points: Iterable[T]) -> list[T]:
    """
    Keep the points whose `.position` lies inside the corridor.

    Order-preserving. An empty result is valid.
    """
    return [p for p in points if corridor.contains(p.position)]
