from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache
from typing import List, Literal


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Execution Tracker"
    debug: bool = False

    # Slack
    slack_bot_token: str = ""
    slack_channel_id: str = ""
    slack_api_timeout: int = 30  # Seconds, applied to history calls and file downloads

    # Metadata store
    database_url: str = "sqlite:///./execution_tracker.db"

    # Blob store (S3-compatible)
    minio_endpoint: str = ""
    minio_access_key: str = ""
    minio_secret_key: str = ""
    minio_secure: bool = True
    minio_bucket: str = "execution-images"
    minio_public_base_url: str = ""  # e.g. https://cdn.example.com, defaults to the endpoint

    # Sync engine
    sync_resume_strategy: Literal["watermark", "epoch"] = "watermark"
    sync_epoch: str = "2026-01-01"
    sync_page_size: int = 100
    sync_max_pages: int = 5
    sync_lease_seconds: int = 600
    timezone: str = "Asia/Kolkata"

    # Reference data
    stores_seed_file: str = "data/stores.yaml"
    store_match_threshold: int = 60

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    def missing_sync_credentials(self) -> List[str]:
        """Names of the environment variables a sync run needs but are empty."""
        required = {
            "SLACK_BOT_TOKEN": self.slack_bot_token,
            "SLACK_CHANNEL_ID": self.slack_channel_id,
            "MINIO_ENDPOINT": self.minio_endpoint,
            "MINIO_ACCESS_KEY": self.minio_access_key,
            "MINIO_SECRET_KEY": self.minio_secret_key,
        }
        return [name for name, value in required.items() if not value]


@lru_cache
def get_settings() -> Settings:
    return Settings()
