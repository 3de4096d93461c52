# Slack integration module
from execution_tracker.integrations.slack.client import SlackClient
from execution_tracker.integrations.slack.models import SlackFile, SlackHistoryMessage, HistoryPage
from execution_tracker.integrations.slack.parser import (
    slack_ts_to_datetime,
    datetime_to_slack_ts,
    sanitize_file_name,
    photo_source_key,
    derive_blob_name,
    later_ts,
)

__all__ = [
    "SlackClient",
    "SlackFile",
    "SlackHistoryMessage",
    "HistoryPage",
    "slack_ts_to_datetime",
    "datetime_to_slack_ts",
    "sanitize_file_name",
    "photo_source_key",
    "derive_blob_name",
    "later_ts",
]
