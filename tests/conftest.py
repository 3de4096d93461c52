"""
Shared fixtures: in-memory database, fake Slack and blob store collaborators.
"""

import sys
from decimal import Decimal
from pathlib import Path
from typing import Callable, Dict, List, Optional

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from execution_tracker.config import Settings
from execution_tracker.database import init_db
from execution_tracker.errors import BlobStoreError, FileDownloadError, MessageSourceError
from execution_tracker.integrations.slack import HistoryPage, SlackHistoryMessage
from execution_tracker.services.sync_engine import SyncEngine


class FakeSlackClient:
    """
    In-memory stand-in for SlackClient.

    Applies oldest/latest/inclusive the way conversations.history does,
    returns newest first and uses the list offset as the cursor.
    """

    def __init__(self, messages: Optional[List[Dict]] = None):
        self.messages = list(messages or [])
        self.failing_urls = set()
        self.history_error: Optional[MessageSourceError] = None
        self.history_calls: List[Dict] = []
        self.downloads: List[str] = []
        self.expired_cursors = set()
        self.before_page: Optional[Callable[[], None]] = None

    def _in_bounds(self, ts: str, oldest: Optional[str], latest: Optional[str], inclusive: bool) -> bool:
        value = Decimal(ts)
        if oldest is not None:
            low = Decimal(oldest)
            if value < low or (value == low and not inclusive):
                return False
        if latest is not None:
            high = Decimal(latest)
            if value > high or (value == high and not inclusive):
                return False
        return True

    async def fetch_history_page(
        self,
        channel_id: str,
        oldest: Optional[str] = None,
        latest: Optional[str] = None,
        cursor: Optional[str] = None,
        limit: int = 100,
        inclusive: bool = False,
    ) -> HistoryPage:
        self.history_calls.append(
            {"channel_id": channel_id, "oldest": oldest, "latest": latest,
             "cursor": cursor, "limit": limit, "inclusive": inclusive}
        )
        if self.before_page:
            self.before_page()
        if self.history_error:
            raise self.history_error
        if cursor in self.expired_cursors:
            raise MessageSourceError("Slack API error: invalid_cursor", "invalid_cursor")

        matching = sorted(
            (m for m in self.messages if self._in_bounds(m["ts"], oldest, latest, inclusive)),
            key=lambda m: Decimal(m["ts"]),
            reverse=True,
        )
        start = int(cursor) if cursor else 0
        chunk = matching[start:start + limit]
        next_cursor = str(start + limit) if start + limit < len(matching) else None

        return HistoryPage(
            messages=[SlackHistoryMessage.model_validate(m) for m in chunk],
            next_cursor=next_cursor,
            has_more=next_cursor is not None,
        )

    async def download_file(self, url: str) -> bytes:
        self.downloads.append(url)
        if url in self.failing_urls:
            raise FileDownloadError("Download failed with HTTP 404", status_code=404)
        return f"bytes of {url}".encode()


class FakeBlobStore:
    """Records uploads in a dict keyed by object name."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.failing_names = set()

    async def upload(self, name: str, data: bytes, content_type: Optional[str]) -> str:
        if name in self.failing_names:
            raise BlobStoreError("Upload failed: SlowDown: Please reduce your request rate")
        self.objects[name] = data
        self.content_types[name] = content_type
        return f"https://blob.test/execution-images/{name}"


def image_file(name: str = "shelf.jpg", mimetype: str = "image/jpeg", url: Optional[str] = None) -> Dict:
    """Slack file payload as listed on a history message."""
    return {
        "id": f"F-{name}",
        "name": name,
        "mimetype": mimetype,
        "url_private_download": url or f"https://files.slack.test/{name}",
    }


def slack_message(ts: str, files: Optional[List[Dict]] = None, text: str = "") -> Dict:
    return {"ts": ts, "text": text, "files": files or [], "user": "U123"}


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(db_engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    yield session
    session.close()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        slack_bot_token="xoxb-test",
        slack_channel_id="C123",
        minio_endpoint="minio.test:9000",
        minio_access_key="access",
        minio_secret_key="secret",
        sync_resume_strategy="watermark",
        sync_epoch="2026-01-01",
        sync_page_size=100,
        sync_max_pages=5,
        sync_lease_seconds=600,
        timezone="Asia/Kolkata",
        store_match_threshold=60,
    )


@pytest.fixture
def fake_slack():
    return FakeSlackClient()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def sync_engine(db, fake_slack, blob_store, settings):
    return SyncEngine(session=db, slack=fake_slack, blob_store=blob_store, settings=settings)


@pytest.fixture
def client(db, settings, fake_slack, blob_store):
    """TestClient wired to the in-memory database and fake collaborators."""
    from fastapi.testclient import TestClient

    from execution_tracker.api.routes.slack import get_importer_factory
    from execution_tracker.api.routes.sync import get_sync_engine_factory
    from execution_tracker.config import get_settings
    from execution_tracker.database import get_db
    from execution_tracker.main import app
    from execution_tracker.services.sync_engine import MessageImporter

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_sync_engine_factory] = lambda: (
        lambda session, s: SyncEngine(session, fake_slack, blob_store, s)
    )
    app.dependency_overrides[get_importer_factory] = lambda: (
        lambda session, s: MessageImporter(session, fake_slack, blob_store)
    )

    # Not entered as a context manager, so the lifespan hook never creates a real database
    yield TestClient(app)

    app.dependency_overrides.clear()
