"""
TravelRisk API: Application entry point.

Bootstraps FastAPI, wires up middleware, registers route groups, and
manages the MongoDB connection and the background alert checker.

Extension points:
  - Add new route groups with app.include_router() below
  - Map new domain errors in the exception handler block
  - Change startup behaviour in the lifespan context manager
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from travelrisk.core import errors
from travelrisk.core.config import settings
from travelrisk.core.database import close_mongo_connection, connect_to_mongo
from travelrisk.core.rate_limit import limiter
from travelrisk.routes.ai import router as ai_router
from travelrisk.routes.alerts import router as alerts_router
from travelrisk.routes.cron import router as cron_router
from travelrisk.routes.health import router as health_router
from travelrisk.routes.plan import router as plan_router
from travelrisk.routes.reports import router as reports_router
from travelrisk.routes.risks import router as risks_router
from travelrisk.routes.routines import router as routines_router
from travelrisk.routes.trips import router as trips_router
from travelrisk.services.alerts import run_alert_loop

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Code before `yield` runs on startup; code after runs on shutdown.

    The alert checker runs as a task for the life of the app unless
    ALERT_POLL_INTERVAL_S is 0.
    """
    logger.info("Starting TravelRisk API (env: %s)", settings.environment)
    await connect_to_mongo()

    alert_task = None
    if settings.alert_poll_interval_s > 0:
        alert_task = asyncio.create_task(run_alert_loop(settings.alert_poll_interval_s))

    yield

    logger.info("Shutting down TravelRisk API")
    if alert_task is not None:
        alert_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await alert_task
    await close_mongo_connection()


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="TravelRisk API",
    description=(
        "Trips, routines, hazard reports and route-corridor risk scoring. "
        "Risk scores are estimates from weather and user reports."
    ),
    version="0.1.0",
    lifespan=lifespan,
    # Disable docs in production to reduce attack surface
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)


# ─── Rate limiting ─────────────────────────────────────────────────────────────
# Routes opt in with @limiter.limit(...) + a request: Request parameter.
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ─── Domain errors ─────────────────────────────────────────────────────────────
@app.exception_handler(errors.ValidationError)
async def _validation_error_handler(request: Request, exc: errors.ValidationError):
    return JSONResponse(status_code=422, content={"error": f"Unable to plan trip: {exc}"})


@app.exception_handler(errors.UpstreamFetchError)
async def _upstream_error_handler(request: Request, exc: errors.UpstreamFetchError):
    logger.error("Upstream failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"error": "Failed to plan trip"})


# ─── Middleware ─────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/api/v1/health", tags=["health"])

# Stored entities
app.include_router(risks_router)
app.include_router(reports_router)
app.include_router(trips_router)
app.include_router(routines_router)

# Alerts + checker trigger
app.include_router(alerts_router)
app.include_router(cron_router)

# Planning + AI
app.include_router(plan_router)
app.include_router(ai_router)


@app.get("/", tags=["root"])
async def root():
    """API root: basic metadata."""
    return {
        "name": "TravelRisk API",
        "version": "0.1.0",
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
    }
