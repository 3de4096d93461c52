# execution_tracker/models/message.py
from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, Text, Boolean, DateTime
from sqlalchemy.orm import relationship

from execution_tracker.database import Base


class SlackMessageRecord(Base):
    """One Slack message that carried at least one file."""

    __tablename__ = "slack_messages"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Slack's "ts" is the natural key of a message within a channel
    slack_ts = Column(String, nullable=False, unique=True, index=True)
    raw_text = Column(Text, nullable=False, default="")

    # Set while any image of the message failed to import; the backfill retries from the earliest one
    import_failed = Column(Boolean, nullable=False, default=False)

    # Derived from slack_ts, not the import time
    created_at = Column(DateTime(timezone=True), nullable=False)
    imported_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    photos = relationship("Photo", back_populates="message")

    def __repr__(self) -> str:
        return f"<SlackMessageRecord(id={self.id}, slack_ts={self.slack_ts})>"
