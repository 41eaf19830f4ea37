"""
database.py: the Motor client shared by the routes and the alert checker.

Collections: risks, reports, trips, routines, alerts. Ids are ObjectIds,
coordinates are {lat, lng} sub-documents.

connect_to_mongo() runs in the app lifespan. If the ping fails the API
still starts: get_db() returns None, CRUD routes answer 503, planning
answers 502 and the alert loop skips its ticks.
"""

import logging
import re

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from travelrisk.core.config import settings

logger = logging.getLogger(__name__)

# (collection, keys) for every query the API runs on a hot path
INDEXES = [
    ("reports", [("created_at", -1)]),
    ("trips", [("user_id", 1), ("created_at", -1)]),
    ("trips", [("notified", 1), ("departure_time", 1)]),
    ("routines", [("user_id", 1)]),
    ("routines", [("repeat_days", 1)]),
    ("alerts", [("user_id", 1), ("is_read", 1), ("created_at", 1)]),
]


class DatabaseClient:
    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None


db_client = DatabaseClient()


async def ensure_indexes(db) -> None:
    """Create the indexes in INDEXES. Idempotent."""
    for collection, keys in INDEXES:
        await db[collection].create_index(keys)
    logger.info("Ensured %d indexes", len(INDEXES))


async def connect_to_mongo() -> None:
    logger.info("Connecting to MongoDB at %s", _redact_uri(settings.mongo_uri))
    try:
        db_client.client = AsyncIOMotorClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=5000,
            tlsCAFile=certifi.where(),
        )
        db_client.db = db_client.client[settings.mongo_db_name]
        await db_client.client.admin.command("ping")
        await ensure_indexes(db_client.db)
        logger.info("MongoDB ready (db: %s)", settings.mongo_db_name)
    except Exception as exc:
        logger.warning("MongoDB unavailable at startup, running without a database: %s", exc)
        db_client.client = None
        db_client.db = None


async def close_mongo_connection() -> None:
    if db_client.client is not None:
        db_client.client.close()
        logger.info("MongoDB connection closed")


def get_db() -> AsyncIOMotorDatabase | None:
    """FastAPI dependency. None means the database is unavailable."""
    return db_client.db


def _redact_uri(uri: str) -> str:
    return re.sub(r"://[^:]+:[^@]+@", "://<redacted>@", uri)
