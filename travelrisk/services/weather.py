"""
weather.py: Weather lookup and the weather → risk formula.

Two runtime modes (WEATHER_MOCK_MODE):
  - MOCK (default): synthetic weather seeded by the rounded coordinates.
    The same position always gets the same weather, so plans are
    reproducible in tests and local dev.
  - REAL: OpenWeatherMap One Call 3.0. Requires OPENWEATHER_API_KEY;
    without it the client logs a warning and stays in mock mode.

Fetch failures raise UpstreamFetchError. No partial marker lists are
returned.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Optional

import httpx

from travelrisk.core.config import settings
from travelrisk.core.errors import UpstreamFetchError
from travelrisk.models.geo import Coordinate
from travelrisk.models.risk import RiskMarker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeatherSample:
    temp: float          # °C
    visibility: float    # metres
    precip_prob: float   # 0–1, next hour
    humidity: float = 0.0
    wind_speed: float = 0.0
    summary: str = "Clear"


def risk_from_weather(temp: float, visibility: float, precip_prob: float) -> float:
    """
    ((temp + 35) / 60 + (1 - precip_prob) + visibility / 10000) / 3 * 100

    Bounded only by its inputs. temp=15, visibility=7500, precip=0.3 → ≈76.11.
    """
    return ((temp + 35) / 60 + (1 - precip_prob) + visibility / 10000) / 3 * 100


def risk_from_sample(sample: WeatherSample) -> float:
    return risk_from_weather(sample.temp, sample.visibility, sample.precip_prob)


def _mock_weather(lat: float, lng: float) -> WeatherSample:
    rng = random.Random(f"{lat:.3f}:{lng:.3f}")
    base_temp = 15 + (lat + 90) / 180 * 30
    temp = base_temp + (rng.random() - 0.5) * 20
    visibility = 5000 + rng.random() * 5000
    precip = rng.random() * 0.8
    if precip > 0.6:
        summary = "Rain"
    elif precip > 0.3:
        summary = "Clouds"
    else:
        summary = "Clear"
    return WeatherSample(
        temp=temp,
        visibility=visibility,
        precip_prob=precip,
        humidity=40 + rng.random() * 40,
        wind_speed=rng.random() * 15,
        summary=summary,
    )


def _parse_onecall(data: dict) -> WeatherSample:
    current = data["current"]
    hourly = data.get("hourly") or [{}]
    weather = current.get("weather") or [{}]
    return WeatherSample(
        temp=float(current["temp"]),
        # OpenWeatherMap omits visibility above 10 km
        visibility=float(current.get("visibility", 10_000)),
        precip_prob=float(hourly[0].get("pop", 0.0)),
        humidity=float(current.get("humidity", 0.0)),
        wind_speed=float(current.get("wind_speed", 0.0)),
        summary=weather[0].get("main", "Clear"),
    )


class WeatherClient:
    """Async weather source. Use the module-level `weather_client` singleton."""

    def __init__(self) -> None:
        self.mock_mode = settings.weather_mock_mode
        self.api_key = settings.openweather_api_key
        self.base_url = settings.openweather_base_url
        self.timeout = settings.http_timeout_s

        if not self.mock_mode and not self.api_key:
            logger.warning(
                "OPENWEATHER_API_KEY not set, falling back to mock weather. "
                "Set WEATHER_MOCK_MODE=true to silence this warning."
            )
            self.mock_mode = True

    async def weather_at(
        self, lat: float, lng: float, client: Optional[httpx.AsyncClient] = None
    ) -> WeatherSample:
        if self.mock_mode:
            return _mock_weather(lat, lng)

        if client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as own_client:
                return await self._fetch(own_client, lat, lng)
        return await self._fetch(client, lat, lng)

    async def _fetch(self, client: httpx.AsyncClient, lat: float, lng: float) -> WeatherSample:
        try:
            response = await client.get(
                self.base_url,
                params={
                    "lat": lat,
                    "lon": lng,
                    "appid": self.api_key,
                    "units": "metric",
                    "exclude": "minutely,alerts",
                },
            )
            response.raise_for_status()
            return _parse_onecall(response.json())
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Weather API error: %s: %s",
                exc.response.status_code,
                exc.response.text[:200],
            )
            raise UpstreamFetchError("weather", f"HTTP {exc.response.status_code}") from exc
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            logger.error("Weather request failed at (%.4f, %.4f): %s", lat, lng, exc)
            raise UpstreamFetchError("weather", str(exc)) from exc

    async def markers_at(self, positions: list[Coordinate]) -> list[RiskMarker]:
        """Weather risk marker for each position, in input order."""
        if not positions:
            return []
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            samples = await asyncio.gather(
                *(self.weather_at(p.lat, p.lng, client) for p in positions)
            )
        return [
            RiskMarker(position=p, risk=risk_from_sample(s))
            for p, s in zip(positions, samples)
        ]


weather_client = WeatherClient()
