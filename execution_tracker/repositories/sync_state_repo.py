# execution_tracker/repositories/sync_state_repo.py
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from execution_tracker.models.sync_state import SyncCheckpoint, SyncLease, SyncWatermark
from execution_tracker.utils.helpers import as_utc


class SyncStateRepository:
    """Checkpoint, watermark and lease rows that make the sync engine safely re-invocable."""

    def __init__(self, db: Session):
        self.db = db

    # ── Checkpoints ──────────────────────────────────────

    def get_checkpoint(self, scope: str) -> Optional[SyncCheckpoint]:
        return self.db.get(SyncCheckpoint, scope)

    def save_checkpoint(
        self,
        scope: str,
        channel_id: str,
        cursor: str,
        oldest: Optional[str],
        latest: Optional[str],
        inclusive: bool,
        scan_newest: Optional[str] = None,
    ) -> SyncCheckpoint:
        checkpoint = self.get_checkpoint(scope) or SyncCheckpoint(scope=scope)
        checkpoint.channel_id = channel_id
        checkpoint.cursor = cursor
        checkpoint.oldest = oldest
        checkpoint.latest = latest
        checkpoint.inclusive = inclusive
        checkpoint.scan_newest = scan_newest
        checkpoint.updated_at = datetime.now(timezone.utc)
        self.db.add(checkpoint)
        self.db.commit()
        return checkpoint

    def clear_checkpoint(self, scope: str) -> None:
        self.db.execute(delete(SyncCheckpoint).where(SyncCheckpoint.scope == scope))
        self.db.commit()

    # ── Watermarks ───────────────────────────────────────

    def get_watermark(self, scope: str) -> Optional[str]:
        watermark = self.db.get(SyncWatermark, scope)
        return watermark.synced_through if watermark else None

    def advance_watermark(self, scope: str, channel_id: str, slack_ts: str) -> str:
        """Move the watermark forward to slack_ts. Never moves it back."""
        watermark = self.db.get(SyncWatermark, scope)
        if watermark is None:
            watermark = SyncWatermark(scope=scope, channel_id=channel_id, synced_through=slack_ts)
        elif Decimal(slack_ts) > Decimal(watermark.synced_through):
            watermark.synced_through = slack_ts
        else:
            return watermark.synced_through
        watermark.updated_at = datetime.now(timezone.utc)
        self.db.add(watermark)
        self.db.commit()
        return watermark.synced_through

    # ── Leases ───────────────────────────────────────────

    def acquire_lease(self, name: str, ttl_seconds: int) -> Optional[str]:
        """
        Take the named lease if it is free or expired.

        Returns:
            A token to pass to release_lease, or None if another holder
            has an unexpired lease.
        """
        now = datetime.now(timezone.utc)
        token = str(uuid.uuid4())
        expires_at = now + timedelta(seconds=ttl_seconds)

        lease = self.db.get(SyncLease, name)
        if lease is None:
            self.db.add(SyncLease(name=name, token=token, expires_at=expires_at))
            try:
                self.db.commit()
            except IntegrityError:
                # Another run inserted the row first
                self.db.rollback()
                return None
            return token

        if as_utc(lease.expires_at) > now:
            return None

        # Compare-and-swap on the stale token so two runs cannot both take over
        result = self.db.execute(
            update(SyncLease)
            .where(SyncLease.name == name, SyncLease.token == lease.token)
            .values(token=token, expires_at=expires_at)
        )
        self.db.commit()
        if result.rowcount != 1:
            return None
        self.db.expire_all()
        return token

    def release_lease(self, name: str, token: str) -> bool:
        result = self.db.execute(
            delete(SyncLease).where(SyncLease.name == name, SyncLease.token == token)
        )
        self.db.commit()
        return result.rowcount == 1

    def renew_lease(self, name: str, token: str, ttl_seconds: int) -> bool:
        """
        Push the expiry of a held lease forward.

        Returns:
            False if the lease is no longer held with this token
        """
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
        result = self.db.execute(
            update(SyncLease)
            .where(SyncLease.name == name, SyncLease.token == token)
            .values(expires_at=expires_at)
        )
        self.db.commit()
        return result.rowcount == 1
