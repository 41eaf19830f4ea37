"""
ai.py: Short natural-language description of a drive.

  GET  /api/v1/ai/describe?from=…&to=…[&weather=…] : one sentence
  POST /api/v1/ai/describe {from, to, weather?}         three sentences

Weather defaults to "sunny". Any generator failure → 500
{"error": "Failed to generate AI description"}.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from travelrisk.ai.gemini_client import gemini_client
from travelrisk.core.rate_limit import AI_RATE_LIMIT, limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ai", tags=["ai"])

_DEFAULT_WEATHER = "sunny"


class DescribeRequest(BaseModel):
    from_location: str = Field(..., min_length=1, alias="from")
    to_location: str = Field(..., min_length=1, alias="to")
    weather: Optional[str] = Field(default=None, max_length=100)

    model_config = {"populate_by_name": True}


class DescribeResponse(BaseModel):
    success: bool = True
    description: str
    from_location: str = Field(..., serialization_alias="from")
    to_location: str = Field(..., serialization_alias="to")
    weather: str


async def _describe(from_location: str, to_location: str, weather: str, long: bool):
    try:
        description = await gemini_client.describe_drive(
            from_location, to_location, weather, long=long
        )
    except Exception as exc:
        logger.error("Drive description failed: %s", exc)
        return JSONResponse(
            status_code=500, content={"error": "Failed to generate AI description"}
        )
    return DescribeResponse(
        description=description,
        from_location=from_location,
        to_location=to_location,
        weather=weather,
    ).model_dump(by_alias=True)


@router.get("/describe")
@limiter.limit(AI_RATE_LIMIT)
async def describe_short(
    request: Request,
    from_location: str = Query(..., min_length=1, alias="from"),
    to_location: str = Query(..., min_length=1, alias="to"),
    weather: Optional[str] = Query(default=None, max_length=100),
):
    return await _describe(from_location, to_location, weather or _DEFAULT_WEATHER, long=False)


@router.post("/describe")
@limiter.limit(AI_RATE_LIMIT)
async def describe_long(request: Request, payload: DescribeRequest):
    return await _describe(
        payload.from_location,
        payload.to_location,
        payload.weather or _DEFAULT_WEATHER,
        long=True,
    )
