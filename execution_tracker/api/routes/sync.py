"""
Sync API Routes

POST /api/sync - Backfill channel history into the triage queue
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Callable, Optional
import logging

from execution_tracker.config import Settings, get_settings
from execution_tracker.database import get_db
from execution_tracker.errors import ConfigurationError
from execution_tracker.models.api_responses import SyncRequest, SyncResponse
from execution_tracker.services.sync_engine import SyncEngine, build_sync_engine

logger = logging.getLogger(__name__)
router = APIRouter()


def get_sync_engine_factory() -> Callable[[Session, Settings], SyncEngine]:
    """Dependency returning the engine factory, overridden in tests."""
    return build_sync_engine


@router.post("", response_model=SyncResponse)
async def sync_history(
    request: Optional[SyncRequest] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    engine_factory: Callable[[Session, Settings], SyncEngine] = Depends(get_sync_engine_factory),
):
    """
    Run one bounded history sync.

    Body (optional): {"startDate": "YYYY-MM-DD", "endDate": "YYYY-MM-DD"}

    When the response has hasMore=true the page cap was reached; call again
    with the same body to continue where this run stopped.

    Examples:
    - POST /api/sync  (resume from the configured strategy)
    - POST /api/sync  {"startDate": "2026-02-01", "endDate": "2026-02-10"}
    """
    try:
        engine = engine_factory(db, settings)
    except ConfigurationError as e:
        logger.error(f"Sync not configured: {e}")
        return SyncResponse(success=False, error=str(e))

    try:
        result = await engine.run(request)
        return result.to_response()
    except Exception as e:
        logger.error(f"Sync failed: {e}")
        raise HTTPException(
            status_code=500,
            detail={"success": False, "message": f"Sync failed: {str(e)}"},
        )
