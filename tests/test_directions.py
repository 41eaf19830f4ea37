"""
Tests for services/directions.py: the mock straight-line router and
OSRM response handling.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from fakes import FakeDatabase
from travelrisk.core.errors import UpstreamFetchError
from travelrisk.models.geo import Coordinate
from travelrisk.models.plan import PlanTripRequest
from travelrisk.models.trip import TravelMode
from travelrisk.services.directions import DirectionsClient, format_coordinates, straight_line
from travelrisk.services.planner import PlanningSession, plan_trip

LONDON = Coordinate(lat=51.5074, lng=-0.1278)
OXFORD = Coordinate(lat=51.7520, lng=-1.2577)


class TestStraightLine:
    def test_endpoints(self):
        line = straight_line(LONDON, OXFORD)
        assert line[0] == LONDON
        assert line[-1].lat == pytest.approx(OXFORD.lat)
        assert line[-1].lng == pytest.approx(OXFORD.lng)

    def test_roughly_five_km_steps(self):
        # ~83 km apart
        assert 18 <= len(straight_line(LONDON, OXFORD)) <= 20

    def test_identical_points_give_two(self):
        assert straight_line(LONDON, LONDON) == [LONDON, LONDON]

    def test_capped(self):
        far = Coordinate(lat=-33.87, lng=151.21)
        assert len(straight_line(LONDON, far)) == 200


def test_format_coordinates_is_lng_first():
    assert format_coordinates([LONDON, OXFORD]) == "-0.1278,51.5074;-1.2577,51.752"


class TestOsrm:
    def _client(self) -> DirectionsClient:
        from travelrisk.core.config import settings

        with patch.object(settings, "directions_mock_mode", False):
            return DirectionsClient()

    def _response(self, body: dict, status: int = 200) -> httpx.Response:
        return httpx.Response(status, json=body, request=httpx.Request("GET", "http://osrm"))

    async def test_parses_geojson_geometry(self):
        body = {
            "code": "Ok",
            "routes": [{"geometry": {"coordinates": [[-0.1278, 51.5074], [-1.2577, 51.752]]}}],
        }
        get = AsyncMock(return_value=self._response(body))
        with patch.object(httpx.AsyncClient, "get", get):
            route = await self._client().route(LONDON, OXFORD, TravelMode.CYCLING)

        assert [(p.lat, p.lng) for p in route] == [(51.5074, -0.1278), (51.752, -1.2577)]
        assert "/route/v1/bike/" in get.await_args.args[0]

    async def test_no_route_raises(self):
        get = AsyncMock(return_value=self._response({"code": "NoRoute", "message": "Impossible route"}))
        with patch.object(httpx.AsyncClient, "get", get):
            with pytest.raises(UpstreamFetchError, match="Impossible route"):
                await self._client().route(LONDON, OXFORD)

    async def test_network_error_raises(self):
        get = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with patch.object(httpx.AsyncClient, "get", get):
            with pytest.raises(UpstreamFetchError) as exc_info:
                await self._client().route(LONDON, OXFORD)
        assert exc_info.value.source == "directions"

    @pytest.mark.parametrize(
        "body",
        [
            {"code": "Ok", "routes": [{"distance": 1000}]},
            {"code": "Ok", "routes": [{"geometry": {"coordinates": [[-0.12]]}}]},
            ["not", "an", "object"],
        ],
    )
    async def test_malformed_payload_raises(self, body):
        get = AsyncMock(return_value=self._response(body))
        with patch.object(httpx.AsyncClient, "get", get):
            with pytest.raises(UpstreamFetchError) as exc_info:
                await self._client().route(LONDON, OXFORD)
        assert exc_info.value.source == "directions"

    async def test_malformed_payload_clears_session(self):
        session = PlanningSession("s")
        await plan_trip(PlanTripRequest(origin=LONDON, destination=OXFORD), session, FakeDatabase())
        assert session.result is not None

        get = AsyncMock(return_value=self._response({"code": "Ok", "routes": [{}]}))
        with patch.object(httpx.AsyncClient, "get", get):
            with pytest.raises(UpstreamFetchError):
                await plan_trip(
                    PlanTripRequest(origin=LONDON, destination=OXFORD),
                    session,
                    FakeDatabase(),
                    directions=self._client(),
                )
        assert session.result is None
        assert not session.layer.visible
