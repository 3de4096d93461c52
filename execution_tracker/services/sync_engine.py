"""
Slack History Sync Engine

Backfills image attachments posted to the execution channel:

Slack history page -> message row -> file download -> blob upload -> photo row

A run is bounded by a page cap. When the cap is hit the continuation cursor
is saved in sync_checkpoints and the caller is told to invoke again; every
piece of resume and dedup state lives in the database, so the engine itself
is stateless and safe to re-run. A lease row keeps two runs on the same
channel from overlapping.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from execution_tracker.config import Settings
from execution_tracker.errors import (
    BlobStoreError,
    ConfigurationError,
    FileDownloadError,
    MessageSourceError,
)
from execution_tracker.integrations.slack import (
    SlackClient,
    SlackFile,
    SlackHistoryMessage,
    datetime_to_slack_ts,
    derive_blob_name,
    later_ts,
    photo_source_key,
    slack_ts_to_datetime,
)
from execution_tracker.integrations.slack.parser import DEFAULT_FILE_NAME
from execution_tracker.integrations.storage import BlobStore, build_blob_store
from execution_tracker.models.api_responses import SyncRequest, SyncResponse
from execution_tracker.repositories import (
    MessageRepository,
    PhotoRepository,
    SyncStateRepository,
)
from execution_tracker.utils.helpers import end_of_local_day, start_of_local_day

logger = logging.getLogger(__name__)


@dataclass
class SyncBounds:
    """Timestamp window of one history scan."""

    oldest: Optional[str]
    latest: Optional[str]
    inclusive: bool
    scope: str
    advances_watermark: bool = False


@dataclass
class SyncResult:
    """Outcome of a sync run (or a single webhook import)."""

    success: bool = True
    imported_count: int = 0
    scanned_count: int = 0
    skipped_count: int = 0
    has_more: bool = False
    errors: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def to_response(self) -> SyncResponse:
        return SyncResponse(
            success=self.success,
            count=self.imported_count,
            scanned=self.scanned_count,
            skipped=self.skipped_count,
            hasMore=self.has_more,
            errors=self.errors,
            error=self.error,
        )


class MessageImporter:
    """
    Imports the image attachments of one Slack message.

    Shared by the history sync and the realtime webhook so both paths
    apply the same dedup keys and storage naming.
    """

    def __init__(self, session: Session, slack: SlackClient, blob_store: BlobStore):
        self.session = session
        self.slack = slack
        self.blob_store = blob_store
        self.messages = MessageRepository(session)
        self.photos = PhotoRepository(session)

    async def import_message(self, message: SlackHistoryMessage, result: SyncResult) -> None:
        """Store the message and each new image file, recording counts and per-file errors in `result`."""
        if not message.has_files:
            return

        result.scanned_count += 1

        try:
            created_at = slack_ts_to_datetime(message.ts)
        except ValueError as e:
            result.errors.append(f"message {message.ts}: {e}")
            return

        try:
            message_id = self._ensure_message_row(message, created_at)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning(f"Could not store message {message.ts}: {e}")
            result.errors.append(f"message {message.ts}: {e}")
            return

        errors_before = len(result.errors)
        for index, slack_file in enumerate(message.files):
            await self._import_file(message, index, slack_file, message_id, created_at, result)

        if message_id:
            self._mark_outcome(message, message_id, failed=len(result.errors) > errors_before)

    def _mark_outcome(self, message: SlackHistoryMessage, message_id: str, failed: bool) -> None:
        try:
            self.messages.set_import_failed(message_id, failed)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning(f"Could not record import outcome of message {message.ts}: {e}")

    def _ensure_message_row(self, message: SlackHistoryMessage, created_at: datetime) -> Optional[str]:
        existing = self.messages.get_by_ts(message.ts)
        if existing:
            return existing.id

        try:
            return self.messages.create(message.ts, message.text, created_at).id
        except IntegrityError:
            # Lost an insert race against another import of the same message
            logger.info(f"Message {message.ts} was stored concurrently, reusing it")
            existing = self.messages.get_by_ts(message.ts)
            return existing.id if existing else None

    async def _import_file(
        self,
        message: SlackHistoryMessage,
        index: int,
        slack_file: SlackFile,
        message_id: Optional[str],
        created_at: datetime,
        result: SyncResult,
    ) -> None:
        file_name = slack_file.name or DEFAULT_FILE_NAME

        if not slack_file.is_image:
            logger.debug(f"Skipping {file_name} ({slack_file.mimetype}): not an image")
            return
        if not slack_file.download_url:
            logger.debug(f"Skipping {file_name}: no download URL")
            return

        source_key = photo_source_key(message.ts, index)

        try:
            if self.photos.exists_by_source_key(source_key):
                logger.debug(f"Skipping {file_name}: already imported as {source_key}")
                result.skipped_count += 1
                return

            data = await self.slack.download_file(slack_file.download_url)
            image_url = await self.blob_store.upload(
                derive_blob_name(message.ts, index, slack_file.name),
                data,
                slack_file.mimetype,
            )
            self.photos.create(
                message_id=message_id,
                source_key=source_key,
                image_url=image_url,
                raw_text=message.text,
                created_at=created_at,
            )
        except IntegrityError:
            logger.info(f"Photo {source_key} was stored concurrently, skipping")
            result.skipped_count += 1
            return
        except (FileDownloadError, BlobStoreError, SQLAlchemyError) as e:
            if isinstance(e, SQLAlchemyError):
                self.session.rollback()
            logger.warning(f"Failed to import {file_name} from message {message.ts}: {e}")
            result.errors.append(f"{file_name} (message {message.ts}): {e}")
            return

        result.imported_count += 1


class SyncEngine:
    """
    Bounded, resumable catch-up scan of the channel history.

    Resume strategy (settings.sync_resume_strategy) when no dates are given:
    - "watermark": start after the newest ts a finished backfill scan covered,
      or at the oldest message with an image that failed to import
    - "epoch": start at settings.sync_epoch and rely on dedup for repeats
    """

    def __init__(
        self,
        session: Session,
        slack: SlackClient,
        blob_store: BlobStore,
        settings: Settings,
    ):
        self.session = session
        self.slack = slack
        self.settings = settings
        self.channel_id = settings.slack_channel_id
        self.importer = MessageImporter(session, slack, blob_store)
        self.messages = MessageRepository(session)
        self.state = SyncStateRepository(session)

    @property
    def lease_name(self) -> str:
        return f"slack-history:{self.channel_id}"

    def resolve_bounds(self, request: SyncRequest) -> SyncBounds:
        """
        Work out the timestamp window for a run.

        Explicit dates use local-day semantics: the start date from midnight,
        the end date through 23:59:59.999. Without dates the configured
        resume strategy decides the lower bound and there is no upper bound.
        """
        tz_name = self.settings.timezone

        if request.start_date or request.end_date:
            oldest = (
                datetime_to_slack_ts(start_of_local_day(request.start_date, tz_name))
                if request.start_date else None
            )
            latest = (
                datetime_to_slack_ts(end_of_local_day(request.end_date, tz_name))
                if request.end_date else None
            )
            scope = f"{self.channel_id}:range:{oldest or '-'}:{latest or '-'}"
            return SyncBounds(oldest=oldest, latest=latest, inclusive=True, scope=scope)

        strategy = self.settings.sync_resume_strategy
        scope = f"{self.channel_id}:{strategy}"

        if strategy == "epoch":
            epoch = date.fromisoformat(self.settings.sync_epoch)
            oldest = datetime_to_slack_ts(start_of_local_day(epoch, tz_name))
            return SyncBounds(oldest=oldest, latest=None, inclusive=True, scope=scope)

        # Only completed backfill scans move the watermark, webhook imports never do
        watermark = self.state.get_watermark(scope) or "0"

        retry_from = self.messages.earliest_failed_ts()
        if retry_from and Decimal(retry_from) <= Decimal(watermark):
            logger.info(f"Rescanning from {retry_from} to retry images that failed to import")
            return SyncBounds(
                oldest=retry_from, latest=None, inclusive=True, scope=scope, advances_watermark=True
            )

        # The watermark message itself is already covered
        return SyncBounds(
            oldest=watermark, latest=None, inclusive=False, scope=scope, advances_watermark=True
        )

    async def run(self, request: Optional[SyncRequest] = None) -> SyncResult:
        """
        Run one bounded sync.

        Returns:
            SyncResult; success is False only when the lease is taken or lost,
            or the history listing fails. Per-file failures are listed in errors.
        """
        request = request or SyncRequest()

        token = self.state.acquire_lease(self.lease_name, self.settings.sync_lease_seconds)
        if token is None:
            logger.warning(f"Sync for {self.channel_id} skipped: another run holds the lease")
            return SyncResult(success=False, error="A sync is already in progress, try again shortly")

        try:
            return await self._run(request, token)
        finally:
            self.state.release_lease(self.lease_name, token)

    async def _run(self, request: SyncRequest, token: str) -> SyncResult:
        bounds = self.resolve_bounds(request)
        cursor = None
        scan_newest = None

        checkpoint = self.state.get_checkpoint(bounds.scope)
        if checkpoint:
            # Continue the interrupted scan with the window it started with
            logger.info(f"Resuming sync {bounds.scope} from saved cursor")
            bounds = SyncBounds(
                oldest=checkpoint.oldest,
                latest=checkpoint.latest,
                inclusive=checkpoint.inclusive,
                scope=bounds.scope,
                advances_watermark=bounds.advances_watermark,
            )
            cursor = checkpoint.cursor
            scan_newest = checkpoint.scan_newest

        logger.info(f"Starting sync: channel={self.channel_id}, oldest={bounds.oldest}, "
                    f"latest={bounds.latest}, max_pages={self.settings.sync_max_pages}")

        result = SyncResult()
        pages_fetched = 0
        restarted = False

        while pages_fetched < self.settings.sync_max_pages:
            try:
                page = await self.slack.fetch_history_page(
                    channel_id=self.channel_id,
                    oldest=bounds.oldest,
                    latest=bounds.latest,
                    cursor=cursor,
                    limit=self.settings.sync_page_size,
                    inclusive=bounds.inclusive,
                )
            except MessageSourceError as e:
                if e.error_code == "invalid_cursor" and cursor and not restarted:
                    # Cursors expire; rescan the same window from the top and let dedup skip repeats
                    logger.warning(f"Cursor for {bounds.scope} was rejected, restarting the scan")
                    self.state.clear_checkpoint(bounds.scope)
                    cursor = None
                    restarted = True
                    continue
                logger.error(f"Sync aborted after {pages_fetched} pages: {e}")
                result.success = False
                result.error = str(e)
                return result

            pages_fetched += 1

            if not self.state.renew_lease(self.lease_name, token, self.settings.sync_lease_seconds):
                logger.error(f"Sync aborted after {pages_fetched} pages: lease was taken over")
                result.success = False
                result.error = "The sync lease expired and another run took over"
                return result

            for message in page.messages:
                scan_newest = later_ts(scan_newest, message.ts)
                await self.importer.import_message(message, result)

            cursor = page.next_cursor
            if not cursor or not page.messages:
                self.state.clear_checkpoint(bounds.scope)
                if bounds.advances_watermark and scan_newest:
                    self.state.advance_watermark(bounds.scope, self.channel_id, scan_newest)
                break

            self.state.save_checkpoint(
                bounds.scope,
                self.channel_id,
                cursor,
                bounds.oldest,
                bounds.latest,
                bounds.inclusive,
                scan_newest,
            )
        else:
            result.has_more = True

        logger.info(f"Sync complete: pages={pages_fetched}, scanned={result.scanned_count}, "
                    f"imported={result.imported_count}, skipped={result.skipped_count}, "
                    f"errors={len(result.errors)}, has_more={result.has_more}")
        return result


def build_sync_engine(session: Session, settings: Settings) -> SyncEngine:
    """
    Wire a SyncEngine with real Slack and blob store clients.

    Raises:
        ConfigurationError: If any required credential is missing
    """
    missing = settings.missing_sync_credentials()
    if missing:
        raise ConfigurationError(missing)

    return SyncEngine(
        session=session,
        slack=SlackClient.from_settings(settings),
        blob_store=build_blob_store(settings),
        settings=settings,
    )


def build_message_importer(session: Session, settings: Settings) -> MessageImporter:
    """
    Wire a MessageImporter for the realtime webhook.

    Raises:
        ConfigurationError: If any required credential is missing
    """
    missing = settings.missing_sync_credentials()
    if missing:
        raise ConfigurationError(missing)

    return MessageImporter(
        session=session,
        slack=SlackClient.from_settings(settings),
        blob_store=build_blob_store(settings),
    )
