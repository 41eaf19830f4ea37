"""
rate_limit.py: Global rate limiter instance.

Uses slowapi (a Starlette-compatible wrapper around the `limits` library).
Requests are keyed by client IP address.

Rate-limited routes:
    POST /api/v1/plan            30/minute (directions + weather fan-out)
    GET|POST /api/v1/ai/describe   20/minute (LLM call)

Usage in routes:
    @router.post("")
    @limiter.limit(PLAN_RATE_LIMIT)
    async def my_endpoint(request: Request, payload: MyRequest):
        ...
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

PLAN_RATE_LIMIT = "30/minute"
AI_RATE_LIMIT = "20/minute"

limiter = Limiter(key_func=get_remote_address)
