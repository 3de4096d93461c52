# execution_tracker/repositories/photo_repo.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from execution_tracker.models.photo import Photo, PhotoStatus


class PhotoRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, photo_id: str) -> Optional[Photo]:
        return self.db.query(Photo).filter(Photo.id == photo_id).first()

    def exists_by_source_key(self, source_key: str) -> bool:
        return (
            self.db.query(Photo.id).filter(Photo.source_key == source_key).first()
            is not None
        )

    def create(
        self,
        message_id: Optional[str],
        source_key: str,
        image_url: str,
        raw_text: str,
        created_at: datetime,
    ) -> Photo:
        """Insert a pending photo. Raises IntegrityError if source_key already exists."""
        photo = Photo(
            message_id=message_id,
            source_key=source_key,
            image_url=image_url,
            raw_text=raw_text,
            status=PhotoStatus.PENDING.value,
            tagged_brands=[],
            created_at=created_at,
        )
        self.db.add(photo)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        self.db.refresh(photo)
        return photo

    def list_by_status(self, status: str, skip: int = 0, limit: int = 100) -> List[Photo]:
        # Oldest first so the review queue follows posting order
        return (
            self.db.query(Photo)
            .filter(Photo.status == status)
            .order_by(Photo.created_at.asc(), Photo.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_status(self, status: str) -> int:
        return self.db.query(Photo).filter(Photo.status == status).count()

    def list_approved_between(self, start: datetime, end: datetime) -> List[Photo]:
        return (
            self.db.query(Photo)
            .filter(
                Photo.status == PhotoStatus.APPROVED.value,
                Photo.created_at >= start,
                Photo.created_at < end,
            )
            .all()
        )

    def save(self, photo: Photo) -> Photo:
        self.db.add(photo)
        self.db.commit()
        self.db.refresh(photo)
        return photo

    def delete(self, photo_id: str) -> bool:
        photo = self.get_by_id(photo_id)
        if photo:
            self.db.delete(photo)
            self.db.commit()
            return True
        return False

    def delete_by_status(self, status: str) -> int:
        deleted = (
            self.db.query(Photo)
            .filter(Photo.status == status)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted
