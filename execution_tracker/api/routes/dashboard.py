"""
Payout Dashboard API Routes

1. GET /api/dashboard/payouts - Weekly proof grid and earnings per store
2. GET /api/dashboard/payouts.csv - Same report as a CSV download
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from urllib.parse import quote
import logging
import re

from execution_tracker.config import Settings, get_settings
from execution_tracker.database import get_db
from execution_tracker.errors import NotFoundError
from execution_tracker.models.api_responses import PayoutReport
from execution_tracker.services.payouts import PayoutService, parse_month, report_to_csv

logger = logging.getLogger(__name__)
router = APIRouter()

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def content_disposition(report: PayoutReport) -> str:
    """
    Attachment header for the CSV export.

    Headers must be latin-1, so brand names outside ASCII go in the RFC 5987
    filename* parameter with an ASCII-only filename as the fallback.
    """
    filename = f"payouts-{report.brand}-{report.year}-{report.month:02d}.csv".replace(" ", "_")
    fallback = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def _build_report(brand: str, month: str, db: Session, settings: Settings) -> PayoutReport:
    try:
        year, month_number = parse_month(month)
    except ValueError as e:
        raise HTTPException(status_code=422, detail={"success": False, "message": str(e)})

    try:
        return PayoutService(db, settings.timezone).build_report(brand, year, month_number)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail={"success": False, "message": str(e)})


@router.get("/payouts", response_model=PayoutReport)
async def payouts(
    brand: str = Query(..., description="Brand contest name"),
    month: str = Query(..., description="Calendar month as YYYY-MM"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Example:
    - GET /api/dashboard/payouts?brand=Brand%20A&month=2026-02
    """
    return _build_report(brand, month, db, settings)


@router.get("/payouts.csv")
async def payouts_csv(
    brand: str = Query(..., description="Brand contest name"),
    month: str = Query(..., description="Calendar month as YYYY-MM"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    report = _build_report(brand, month, db, settings)
    return Response(
        content=report_to_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": content_disposition(report)},
    )
