"""
Slack Data Models
"""

from pydantic import BaseModel, field_validator
from typing import List, Optional


class SlackFile(BaseModel):
    """File attachment as listed on a conversations.history message."""

    id: Optional[str] = None
    name: Optional[str] = None
    mimetype: Optional[str] = None
    url_private: Optional[str] = None
    url_private_download: Optional[str] = None

    @property
    def is_image(self) -> bool:
        return bool(self.mimetype) and self.mimetype.startswith("image/")

    @property
    def download_url(self) -> Optional[str]:
        """Prefer the download endpoint, fall back to the private view URL."""
        return self.url_private_download or self.url_private


class SlackHistoryMessage(BaseModel):
    """Slack message as returned by conversations.history or the Events API."""

    ts: str  # Message timestamp (unique ID within the channel)
    text: str = ""
    files: List[SlackFile] = []
    user: Optional[str] = None
    bot_id: Optional[str] = None
    subtype: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def _none_text_to_empty(cls, value):
        return value or ""

    @field_validator("files", mode="before")
    @classmethod
    def _none_files_to_empty(cls, value):
        return value or []

    @property
    def has_files(self) -> bool:
        return len(self.files) > 0


class HistoryPage(BaseModel):
    """One page of conversations.history."""

    messages: List[SlackHistoryMessage]
    next_cursor: Optional[str] = None
    has_more: bool = False
