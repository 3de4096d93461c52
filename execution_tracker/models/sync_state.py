# execution_tracker/models/sync_state.py
from datetime import datetime, timezone

from sqlalchemy import Column, String, Boolean, DateTime

from execution_tracker.database import Base


class SyncCheckpoint(Base):
    """Continuation state of a history sync that stopped at the page cap."""

    __tablename__ = "sync_checkpoints"

    # Channel plus the bounds of the scan, so separate date ranges resume independently
    scope = Column(String, primary_key=True)
    channel_id = Column(String, nullable=False)
    cursor = Column(String, nullable=False)
    oldest = Column(String, nullable=True)
    latest = Column(String, nullable=True)
    inclusive = Column(Boolean, nullable=False, default=False)
    # Newest ts seen by the scan, becomes the watermark once the scan finishes
    scan_newest = Column(String, nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class SyncWatermark(Base):
    """Newest Slack ts a completed backfill scan has covered, per scope."""

    __tablename__ = "sync_watermarks"

    scope = Column(String, primary_key=True)
    channel_id = Column(String, nullable=False)
    synced_through = Column(String, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class SyncLease(Base):
    """Single-row lock held for the duration of a sync run."""

    __tablename__ = "sync_leases"

    name = Column(String, primary_key=True)
    token = Column(String, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
