# execution_tracker/models/photo.py
from enum import Enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from execution_tracker.database import Base


class PhotoStatus(str, Enum):
    """Review lifecycle of an imported photo."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REDUNDANT = "redundant"


class Photo(Base):
    __tablename__ = "photos"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    message_id = Column(
        String, ForeignKey("slack_messages.id", ondelete="SET NULL"), nullable=True
    )

    # "{slack_ts}:{file_index}", one row per Slack attachment
    source_key = Column(String, nullable=False, unique=True, index=True)
    image_url = Column(Text, nullable=False)
    raw_text = Column(Text, nullable=False, default="")

    status = Column(String, nullable=False, default=PhotoStatus.PENDING.value, index=True)
    store_id = Column(String, ForeignKey("stores.id", ondelete="SET NULL"), nullable=True)
    tagged_brands = Column(JSON, nullable=False, default=list)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    message = relationship("SlackMessageRecord", back_populates="photos")
    store = relationship("Store")

    def __repr__(self) -> str:
        return (
            f"<Photo(id={self.id}, "
            f"source_key={self.source_key}, "
            f"status={self.status})>"
        )
