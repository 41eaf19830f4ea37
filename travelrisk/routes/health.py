"""
health.py: GET /api/v1/health

Reports whether the database answers a ping and which collaborators run
in mock mode, so a deploy with a missing API key is visible at a glance.
Always HTTP 200 while the process is alive.
"""

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from travelrisk.ai.gemini_client import gemini_client
from travelrisk.core import database as db_module
from travelrisk.core.config import settings
from travelrisk.services.directions import directions_client
from travelrisk.services.weather import weather_client

logger = logging.getLogger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str  # "connected" | "disconnected"
    environment: str
    # "mock" | "live" per collaborator
    upstreams: dict[str, str]


def _mode(client) -> str:
    return "mock" if client.mock_mode else "live"


@router.get("", response_model=HealthResponse, summary="API health check")
async def health_check() -> HealthResponse:
    database = "disconnected"
    client = db_module.db_client.client
    if client is not None:
        try:
            await client.admin.command("ping")
            database = "connected"
        except Exception as exc:
            logger.warning("DB ping failed: %s", exc)

    return HealthResponse(
        status="ok",
        version="0.1.0",
        database=database,
        environment=settings.environment,
        upstreams={
            "directions": _mode(directions_client),
            "weather": _mode(weather_client),
            "ai": _mode(gemini_client),
        },
    )
