"""
geo.py: Pure spherical coordinate math.

Every function uses the mean Earth radius (EARTH_RADIUS_M). Headings
are degrees clockwise from north.

    offset_point               project a point along a heading
    initial_bearing            heading from one point towards another
    haversine_distance_km      great-circle distance
    generate_random_positions   uniform-by-area samples in a disk (demo only)
"""

from __future__ import annotations

import math
import random
from typing import Optional

from travelrisk.models.geo import Coordinate

EARTH_RADIUS_M = 6_371_000.0


def _wrap_lng(lng: float) -> float:
    return (lng + 540.0) % 360.0 - 180.0


def offset_point(lat: float, lng: float, heading: float, distance_m: float) -> Coordinate:
    """
    Destination reached by travelling `distance_m` from (lat, lng) along
    `heading`, on a sphere.

    No validation: degenerate input (e.g. NaN) yields NaN fields, so the
    result is built with model_construct. Callers must guard.
    """
    d = distance_m / EARTH_RADIUS_M
    heading_rad = math.radians(heading)
    lat_rad = math.radians(lat)
    lng_rad = math.radians(lng)

    new_lat = math.asin(
        math.sin(lat_rad) * math.cos(d)
        + math.cos(lat_rad) * math.sin(d) * math.cos(heading_rad)
    )
    new_lng = lng_rad + math.atan2(
        math.sin(heading_rad) * math.sin(d) * math.cos(lat_rad),
        math.cos(d) - math.sin(lat_rad) * math.sin(new_lat),
    )
    return Coordinate.model_construct(
        lat=math.degrees(new_lat),
        lng=_wrap_lng(math.degrees(new_lng)),
    )


def initial_bearing(a: Coordinate, b: Coordinate) -> float:
    """Initial great-circle heading from a to b, in [-180, 180)."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlng = math.radians(b.lng - a.lng)
    y = math.sin(dlng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlng)
    return _wrap_lng(math.degrees(math.atan2(y, x)))


def haversine_distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in km. 0 for identical points."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * (EARTH_RADIUS_M / 1000.0) * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def generate_random_positions(
    count: int,
    center: Coordinate,
    radius_km: float,
    rng: Optional[random.Random] = None,
) -> list[Coordinate]:
    """
    Sample `count` points uniformly by area within `radius_km` of `center`.

    Radius uses inverse-CDF sampling (sqrt(u) * radius) and the bearing
    is uniform. Each call yields new points unless a seeded `rng` is given.
    """
    rng = rng or random.Random()
    positions = []
    for _ in range(count):
        distance_m = math.sqrt(rng.random()) * radius_km * 1000.0
        bearing = rng.random() * 360.0
        positions.append(offset_point(center.lat, center.lng, bearing, distance_m))
    return positions
