"""
Photo Triage API Routes

1. GET /api/photos - Paginated review queue (pending by default)
2. POST /api/photos/{photo_id}/review - Approve, reject or mark redundant
3. DELETE /api/photos - Clear every photo with a given status
4. DELETE /api/photos/{photo_id} - Remove a single photo
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
import math

from execution_tracker.config import Settings, get_settings
from execution_tracker.database import get_db
from execution_tracker.errors import InvalidTransitionError, NotFoundError
from execution_tracker.models.api_responses import (
    ClearQueueResponse,
    PhotoPage,
    PhotoResponse,
    ReviewRequest,
    StoreResponse,
)
from execution_tracker.models.photo import Photo, PhotoStatus
from execution_tracker.models.store import Store
from execution_tracker.repositories import PhotoRepository, StoreRepository
from execution_tracker.services.store_matcher import best_store_match
from execution_tracker.services.triage import REJECTION_REASONS, TriageService
from execution_tracker.utils.helpers import as_utc

logger = logging.getLogger(__name__)
router = APIRouter()


def _to_response(photo: Photo, stores: Optional[List[Store]] = None, threshold: int = 60) -> PhotoResponse:
    response = PhotoResponse.model_validate(photo)
    response.created_at = as_utc(response.created_at)
    response.reviewed_at = as_utc(response.reviewed_at)

    if stores and photo.status == PhotoStatus.PENDING.value:
        match = best_store_match(photo.raw_text, stores, threshold)
        if match:
            response.store_suggestion = StoreResponse.model_validate(match)
    return response


@router.get("", response_model=PhotoPage)
async def list_photos(
    status: PhotoStatus = Query(PhotoStatus.PENDING, description="Photo status to list"),
    page: int = Query(1, ge=1, description="1-based page number"),
    page_size: int = Query(10, ge=1, le=100, description="Photos per page"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    List photos oldest first, with a fuzzy store suggestion for pending ones.

    Examples:
    - GET /api/photos
    - GET /api/photos?status=approved&page=2&page_size=20
    """
    repo = PhotoRepository(db)
    total = repo.count_by_status(status.value)
    photos = repo.list_by_status(status.value, skip=(page - 1) * page_size, limit=page_size)

    stores = StoreRepository(db).list_all() if status == PhotoStatus.PENDING else None

    return PhotoPage(
        photos=[_to_response(p, stores, settings.store_match_threshold) for p in photos],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total else 0,
    )


@router.get("/rejection-reasons", response_model=List[str])
async def rejection_reasons():
    """Preset rejection reasons offered by the review UI."""
    return REJECTION_REASONS


@router.post("/{photo_id}/review", response_model=PhotoResponse)
async def review_photo(photo_id: str, request: ReviewRequest, db: Session = Depends(get_db)):
    """
    Apply a review decision to a pending photo.

    Body examples:
    - {"action": "approve", "store_id": "...", "brands": ["Brand A"]}
    - {"action": "reject", "rejection_reason": "Too less quantity"}
    - {"action": "redundant"}
    """
    try:
        photo = TriageService(db).review(photo_id, request)
        return _to_response(photo)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail={"success": False, "message": str(e)})
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail={"success": False, "message": str(e)})


@router.delete("", response_model=ClearQueueResponse)
async def clear_photos(
    status: PhotoStatus = Query(PhotoStatus.PENDING, description="Status of the photos to delete"),
    db: Session = Depends(get_db),
):
    """Delete every photo with the given status (clears the pending queue by default)."""
    try:
        deleted = PhotoRepository(db).delete_by_status(status.value)
        logger.info(f"Cleared {deleted} {status.value} photos")
        return ClearQueueResponse(success=True, deleted=deleted)
    except Exception as e:
        logger.error(f"Failed to clear {status.value} photos: {e}")
        raise HTTPException(
            status_code=500,
            detail={"success": False, "message": f"Failed to clear photos: {str(e)}"},
        )


@router.delete("/{photo_id}")
async def delete_photo(photo_id: str, db: Session = Depends(get_db)):
    """Delete a single photo row. The stored image is left in the bucket."""
    if not PhotoRepository(db).delete(photo_id):
        raise HTTPException(
            status_code=404,
            detail={"success": False, "message": f"Photo {photo_id} not found"},
        )
    return {"success": True, "deleted": photo_id}
