"""
reports.py: User-submitted hazard reports.

Routes:
  GET    /api/v1/reports          list reports (limit/offset, newest first)
  POST   /api/v1/reports          submit a report
  GET    /api/v1/reports/{id}     get a single report
  PUT    /api/v1/reports/{id}     partial update
  DELETE /api/v1/reports/{id}     delete

A report carries either a 1–5 risk_level or a qualitative risk_type.
Setting one on update clears the other so a stored report always has
exactly one.
"""

import logging
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from travelrisk.core.database import get_db
from travelrisk.models.report import (
    Pagination,
    ReportCreate,
    ReportListResponse,
    ReportOut,
    ReportUpdate,
)
from travelrisk.services.report_store import doc_to_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


def _validate_oid(report_id: str) -> ObjectId:
    try:
        return ObjectId(report_id)
    except InvalidId:
        raise HTTPException(status_code=422, detail="Invalid report ID format")


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get("", response_model=ReportListResponse)
async def list_reports(
    limit:  int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db=Depends(get_db),
):
    """Return a page of reports, newest first."""
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    total = await db["reports"].count_documents({})
    cursor = db["reports"].find({}).sort("created_at", -1).skip(offset).limit(limit)

    reports = []
    async for doc in cursor:
        try:
            reports.append(doc_to_report(doc))
        except Exception as exc:
            logger.warning("Skipping malformed report doc: %s", exc)

    return ReportListResponse(
        reports=reports,
        pagination=Pagination(
            total=total, limit=limit, offset=offset, has_more=offset + limit < total
        ),
    )


@router.post("", response_model=ReportOut, status_code=201)
async def create_report(payload: ReportCreate, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    doc = {
        **payload.model_dump(mode="json"),
        "created_at": datetime.now(tz=timezone.utc),
    }
    result = await db["reports"].insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("Report %s created", result.inserted_id)
    return doc_to_report(doc)


@router.get("/{report_id}", response_model=ReportOut)
async def get_report(report_id: str, db=Depends(get_db)):
    """Retrieve a single report by ID."""
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    doc = await db["reports"].find_one({"_id": _validate_oid(report_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Report not found")
    return doc_to_report(doc)


@router.put("/{report_id}", response_model=ReportOut)
async def update_report(report_id: str, payload: ReportUpdate, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    oid = _validate_oid(report_id)
    changes = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if "risk_level" in changes and "risk_type" in changes:
        raise HTTPException(
            status_code=422, detail="Provide either risk_level or risk_type, not both"
        )
    if "risk_level" in changes:
        changes["risk_type"] = None
    elif "risk_type" in changes:
        changes["risk_level"] = None

    if not await db["reports"].find_one({"_id": oid}):
        raise HTTPException(status_code=404, detail="Report not found")
    if changes:
        await db["reports"].update_one({"_id": oid}, {"$set": changes})
    return doc_to_report(await db["reports"].find_one({"_id": oid}))


@router.delete("/{report_id}", status_code=204)
async def delete_report(report_id: str, db=Depends(get_db)):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    result = await db["reports"].delete_one({"_id": _validate_oid(report_id)})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Report not found")
    return Response(status_code=204)
