# execution_tracker/repositories/message_repo.py
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from execution_tracker.models.message import SlackMessageRecord


class MessageRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_ts(self, slack_ts: str) -> Optional[SlackMessageRecord]:
        return (
            self.db.query(SlackMessageRecord)
            .filter(SlackMessageRecord.slack_ts == slack_ts)
            .first()
        )

    def create(self, slack_ts: str, raw_text: str, created_at: datetime) -> SlackMessageRecord:
        """Insert a message row. Raises IntegrityError if slack_ts already exists."""
        message = SlackMessageRecord(
            slack_ts=slack_ts,
            raw_text=raw_text,
            created_at=created_at,
        )
        self.db.add(message)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        self.db.refresh(message)
        return message

    def set_import_failed(self, message_id: str, failed: bool) -> None:
        message = self.db.get(SlackMessageRecord, message_id)
        if message is None or message.import_failed == failed:
            return
        message.import_failed = failed
        self.db.commit()

    def earliest_failed_ts(self) -> Optional[str]:
        """Slack timestamp of the oldest message with an image still waiting to be imported."""
        # created_at is derived from slack_ts, string order breaks ties inside one millisecond
        row = (
            self.db.query(SlackMessageRecord.slack_ts)
            .filter(SlackMessageRecord.import_failed.is_(True))
            .order_by(SlackMessageRecord.created_at.asc(), SlackMessageRecord.slack_ts.asc())
            .limit(1)
            .first()
        )
        return row[0] if row else None
