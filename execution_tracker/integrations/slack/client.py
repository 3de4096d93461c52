"""
Slack API Client

Responsibilities:
- conversations.history: Fetch one page of channel messages (cursor pagination)
- File download: Fetch private file bytes with the bot token
- Convert transport/API failures into domain errors
"""

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from execution_tracker.config import Settings
from execution_tracker.errors import MessageSourceError, FileDownloadError
from execution_tracker.integrations.slack.models import HistoryPage, SlackHistoryMessage
from typing import Optional
import asyncio
import logging
import requests

logger = logging.getLogger(__name__)

# conversations.history accepts at most 999, Slack recommends no more than 200
MAX_PAGE_SIZE = 200


class SlackClient:
    """Slack API client for paged history listing and file download."""

    def __init__(
        self,
        token: str,
        timeout: int = 30,
        web_client: Optional[WebClient] = None,
        http_session: Optional[requests.Session] = None,
    ):
        self.token = token
        self.timeout = timeout
        self.client = web_client or WebClient(token=token, timeout=timeout)
        self.http = http_session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SlackClient":
        return cls(token=settings.slack_bot_token, timeout=settings.slack_api_timeout)

    async def fetch_history_page(
        self,
        channel_id: str,
        oldest: Optional[str] = None,
        latest: Optional[str] = None,
        cursor: Optional[str] = None,
        limit: int = 100,
        inclusive: bool = False,
    ) -> HistoryPage:
        """
        Fetch one page of conversation history, newest message first.

        Args:
            channel_id: Slack channel ID
            oldest: Only messages after this Slack timestamp
            latest: Only messages before this Slack timestamp
            cursor: Continuation cursor from the previous page
            limit: Page size (capped at 200)
            inclusive: Include messages exactly at oldest/latest

        Returns:
            HistoryPage with parsed messages and the next cursor, if any

        Raises:
            MessageSourceError: On network failure or an API-level error
        """
        if not channel_id:
            raise MessageSourceError("No channel_id provided", error_code="channel_not_found")

        api_params = {"channel": channel_id, "limit": min(limit, MAX_PAGE_SIZE)}
        if oldest:
            api_params["oldest"] = oldest
        if latest:
            api_params["latest"] = latest
        if inclusive and (oldest or latest):
            api_params["inclusive"] = True
        if cursor:
            api_params["cursor"] = cursor

        logger.debug(f"Fetching history page: channel={channel_id}, oldest={oldest}, "
                     f"latest={latest}, cursor={'yes' if cursor else 'no'}")

        try:
            result = await asyncio.to_thread(
                self.client.conversations_history,
                **api_params
            )
        except SlackApiError as e:
            error_code = e.response.get("error", "unknown_error")
            logger.error(f"Slack API error: {error_code}")
            raise MessageSourceError(f"Slack API error: {error_code}", error_code=error_code) from e
        except Exception as e:
            logger.error(f"Error fetching conversation history: {e}")
            raise MessageSourceError(f"Error fetching conversation history: {e}") from e

        if not result.get("ok", False):
            error_code = result.get("error", "unknown_error")
            logger.error(f"Slack API returned ok=false: {error_code}")
            raise MessageSourceError(f"Slack API error: {error_code}", error_code=error_code)

        raw_messages = result.get("messages", []) or []
        response_metadata = result.get("response_metadata") or {}
        next_cursor = response_metadata.get("next_cursor") or None

        page = HistoryPage(
            messages=[SlackHistoryMessage.model_validate(m) for m in raw_messages],
            next_cursor=next_cursor,
            has_more=bool(result.get("has_more", False)),
        )
        logger.info(f"Fetched {len(page.messages)} messages (more pages: {page.next_cursor is not None})")
        return page

    async def download_file(self, url: str) -> bytes:
        """
        Download a private Slack file.

        Raises:
            FileDownloadError: On network failure, a non-2xx status, or when
                Slack answers with its HTML login page instead of the file
        """
        headers = {"Authorization": f"Bearer {self.token}"}

        try:
            response = await asyncio.to_thread(
                self.http.get, url, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise FileDownloadError(f"Download failed: {e}") from e

        if not response.ok:
            raise FileDownloadError(
                f"Download failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        # Missing files:read scope yields a 200 with the workspace sign-in page
        content_type = response.headers.get("Content-Type", "")
        if content_type.startswith("text/html"):
            raise FileDownloadError(
                "Slack returned an HTML page instead of the file (check the files:read scope)",
                status_code=response.status_code,
            )

        return response.content
