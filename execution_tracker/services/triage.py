"""
Triage Review Service

Applies a reviewer's decision to a pending photo. Every decision is a
terminal move out of "pending":

pending -> approved  (store + at least one brand)
pending -> rejected  (reason)
pending -> redundant
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from execution_tracker.errors import InvalidTransitionError, NotFoundError
from execution_tracker.models.api_responses import ReviewAction, ReviewRequest
from execution_tracker.models.photo import Photo, PhotoStatus
from execution_tracker.repositories import PhotoRepository, StoreRepository
from execution_tracker.utils.helpers import flatten_labels

logger = logging.getLogger(__name__)

# Reasons offered by the review UI; free text is accepted as well
REJECTION_REASONS = [
    "Too less quantity",
    "It should be a shelf execution",
    "It should be an end cap execution",
    "Do not mix different brand in a single execution",
    "Others",
]


class TriageService:
    def __init__(self, db: Session):
        self.photos = PhotoRepository(db)
        self.stores = StoreRepository(db)

    def review(self, photo_id: str, request: ReviewRequest) -> Photo:
        """
        Apply a review decision.

        Raises:
            NotFoundError: Photo (or the store being assigned) does not exist
            InvalidTransitionError: Photo is not pending, or the decision is
                missing the fields it needs
        """
        photo = self.photos.get_by_id(photo_id)
        if not photo:
            raise NotFoundError(f"Photo {photo_id} not found")

        if photo.status != PhotoStatus.PENDING.value:
            raise InvalidTransitionError(
                f"Photo {photo_id} is already {photo.status}; only pending photos can be reviewed"
            )

        if request.action == ReviewAction.APPROVE:
            self._approve(photo, request.store_id, request.brands)
        elif request.action == ReviewAction.REJECT:
            self._reject(photo, request.rejection_reason)
        else:
            photo.status = PhotoStatus.REDUNDANT.value

        photo.reviewed_at = datetime.now(timezone.utc)
        photo = self.photos.save(photo)
        logger.info(f"Photo {photo.id} marked {photo.status}")
        return photo

    def _approve(self, photo: Photo, store_id: Optional[str], brands: List[str]) -> None:
        if not store_id:
            raise InvalidTransitionError("Approving a photo requires a store")

        labels = flatten_labels(brands)
        if not labels:
            raise InvalidTransitionError("Approving a photo requires at least one brand")

        if not self.stores.get_by_id(store_id):
            raise NotFoundError(f"Store {store_id} not found")

        photo.status = PhotoStatus.APPROVED.value
        photo.store_id = store_id
        photo.tagged_brands = labels

    def _reject(self, photo: Photo, reason: Optional[str]) -> None:
        reason = (reason or "").strip()
        if not reason:
            raise InvalidTransitionError("Rejecting a photo requires a reason")

        photo.status = PhotoStatus.REJECTED.value
        photo.rejection_reason = reason
