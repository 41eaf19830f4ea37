"""
planner.py: trip-planning pipeline and per-session display state.

HOW A PLAN RUNS
───────────────
1. directions  → route polyline
2. weather     → risk markers at stations along and beside the route
3. reports     → every stored hazard report
4. merge       → tagged sources with explicit weights (risk_sources.py)
5. corridor    → buffer the route, keep points inside (corridor.py)
6. aggregate   → mean weight + heat-layer points (aggregator.py)

Steps 1–3 are awaited one after another; 4–6 only run once all inputs
have resolved. Any failure aborts the plan, so no partial score is ever
produced.

SESSIONS
────────
A PlanningSession is the display state of one client (one map). Each
plan takes a monotonically increasing token. A result is applied to
the session (score + heat layer) only if its token is still the latest,
so a slow earlier plan can never overwrite a newer one. On failure the
session's displayed result is cleared instead of left stale.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from travelrisk.core.config import settings
from travelrisk.core.errors import StalePlanError, TravelRiskError
from travelrisk.models.geo import Coordinate, HeatmapPoint
from travelrisk.models.plan import PlanTripRequest, PlanTripResponse
from travelrisk.services.aggregator import aggregate_risk
from travelrisk.services.corridor import build_corridor, filter_in_corridor, validate_route
from travelrisk.services.directions import DirectionsClient, directions_client
from travelrisk.services.geo import initial_bearing, offset_point
from travelrisk.services.report_store import load_reports
from travelrisk.services.risk_sources import merge_risk_sources
from travelrisk.services.weather import WeatherClient, weather_client

logger = logging.getLogger(__name__)


_MAX_SESSIONS = 1000


# ── Heat layer resource ───────────────────────────────────────────────────────

class HeatmapLayer:
    """
    The heat-layer contents shown on one map.

    redraw() is the only way to change them: the old points are torn
    down on entry, and the new ones are only shown if the block completes.
    """

    def __init__(self) -> None:
        self.points: list[HeatmapPoint] = []
        self.visible = False

    def clear(self) -> None:
        self.points = []
        self.visible = False

    @contextmanager
    def redraw(self) -> Iterator[list[HeatmapPoint]]:
        self.clear()
        staged: list[HeatmapPoint] = []
        yield staged
        self.points = list(staged)
        self.visible = True


class PlanningSession:
    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self.layer = HeatmapLayer()
        self.result: Optional[PlanTripResponse] = None
        self._latest_token = 0

    def next_token(self) -> int:
        self._latest_token += 1
        return self._latest_token

    def is_current(self, token: int) -> bool:
        return token == self._latest_token

    def apply(self, token: int, result: PlanTripResponse) -> None:
        """Show `result`. Raises StalePlanError if a newer plan has started."""
        if not self.is_current(token):
            raise StalePlanError(token, self._latest_token)
        with self.layer.redraw() as staged:
            staged.extend(result.heatmap_points)
        self.result = result

    def fail(self, token: int) -> None:
        if self.is_current(token):
            self.layer.clear()
            self.result = None


class PlanningSessionStore:
    """In-memory sessions keyed by client-chosen id, least recently used evicted."""

    def __init__(self, max_sessions: int = _MAX_SESSIONS) -> None:
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, PlanningSession] = OrderedDict()

    def get(self, session_id: Optional[str]) -> PlanningSession:
        if session_id is None:
            return PlanningSession("anonymous")
        session = self._sessions.get(session_id)
        if session is None:
            session = PlanningSession(session_id)
            self._sessions[session_id] = session
            if len(self._sessions) > self.max_sessions:
                self._sessions.popitem(last=False)
        else:
            self._sessions.move_to_end(session_id)
        return session

    def __len__(self) -> int:
        return len(self._sessions)


# ── Pipeline ──────────────────────────────────────────────────────────────────

def weather_stations(
    route: list[Coordinate], count: int, offsets_km: Sequence[float] = ()
) -> list[Coordinate]:
    """
    Evenly spaced route vertices, each with stations on both sides at
    `offsets_km` perpendicular to the direction of travel.

    The offsets do not depend on the corridor width, so the width decides
    which of the side stations count towards the score.
    """
    if len(route) < 2:
        return list(route)

    n = min(count, len(route))
    indices = sorted({round(i * (len(route) - 1) / (n - 1)) for i in range(n)})
    stations = []
    for i in indices:
        here = route[i]
        if i < len(route) - 1:
            heading = initial_bearing(here, route[i + 1])
        else:
            heading = initial_bearing(route[i - 1], here)
        stations.append(here)
        for km in offsets_km:
            stations.append(offset_point(here.lat, here.lng, heading - 90, km * 1000))
            stations.append(offset_point(here.lat, here.lng, heading + 90, km * 1000))
    return stations


async def plan_trip(
    request: PlanTripRequest,
    session: PlanningSession,
    db,
    *,
    directions: DirectionsClient = directions_client,
    weather: WeatherClient = weather_client,
) -> PlanTripResponse:
    """
    Run the full pipeline for one request.

    Raises ValidationError / UpstreamFetchError (after clearing the
    session's display if this was its latest plan). A superseded plan
    still returns its result, with applied=False.
    """
    token = session.next_token()
    buffer_m = request.buffer_m or settings.corridor_buffer_m

    try:
        route = validate_route(
            await directions.route(request.origin, request.destination, request.travel_mode)
        )
        markers = await weather.markers_at(
            weather_stations(
                route, settings.weather_station_count, settings.weather_station_offsets_km
            )
        )
        reports = await load_reports(db)

        points = merge_risk_sources(
            markers,
            reports,
            report_default_weight=settings.report_default_weight,
            level_weights=settings.report_level_weights,
        )
        corridor = build_corridor(route, buffer_m)
        inside = filter_in_corridor(corridor, points)
        aggregation = aggregate_risk(inside)
    except TravelRiskError as exc:
        logger.warning("Plan %d for session %s failed: %s", token, session.session_id, exc)
        session.fail(token)
        raise

    result = PlanTripResponse(
        token=token,
        score=aggregation.score.value,
        sample_count=aggregation.score.sample_count,
        heatmap_points=aggregation.heatmap_points,
        corridor=list(corridor.ring),
        route=list(corridor.route),
    )
    try:
        session.apply(token, result)
    except StalePlanError as exc:
        logger.info("Session %s: %s, result discarded", session.session_id, exc)
        result.applied = False
    logger.info(
        "Plan %d (session %s): score %.2f from %d of %d points",
        token, session.session_id, result.score, result.sample_count, len(points),
    )
    return result
