# Shared data models
from execution_tracker.models.message import SlackMessageRecord
from execution_tracker.models.photo import Photo, PhotoStatus
from execution_tracker.models.store import Store, Brand
from execution_tracker.models.sync_state import SyncCheckpoint, SyncLease, SyncWatermark

__all__ = [
    "SlackMessageRecord",
    "Photo",
    "PhotoStatus",
    "Store",
    "Brand",
    "SyncCheckpoint",
    "SyncLease",
    "SyncWatermark",
]
