"""
report_store.py: Read access to the `reports` collection for planning,
plus the document → ReportOut conversion shared with routes/reports.py.
"""

import logging
from datetime import datetime, timezone

from travelrisk.core.errors import UpstreamFetchError
from travelrisk.models.geo import Coordinate
from travelrisk.models.report import ReportOut

logger = logging.getLogger(__name__)


def doc_to_report(doc: dict) -> ReportOut:
    return ReportOut(
        id=str(doc["_id"]),
        coordinates=Coordinate(**doc["coordinates"]),
        risk_level=doc.get("risk_level"),
        risk_type=doc.get("risk_type"),
        description=doc.get("description"),
        created_at=doc.get("created_at", datetime.now(tz=timezone.utc)),
    )


async def load_reports(db) -> list[ReportOut]:
    """
    Every stored report, oldest first.

    Raises UpstreamFetchError when the database is unavailable or the
    query fails; a plan is never scored against a partial report set.
    Malformed documents are skipped with a warning.
    """
    if db is None:
        raise UpstreamFetchError("reports", "database unavailable")

    try:
        docs = await db["reports"].find({}).sort("created_at", 1).to_list(length=None)
    except Exception as exc:
        logger.error("Report query failed: %s", exc)
        raise UpstreamFetchError("reports", str(exc)) from exc

    reports = []
    for doc in docs:
        try:
            reports.append(doc_to_report(doc))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed report doc: %s", exc)
    return reports
