from execution_tracker.repositories.message_repo import MessageRepository
from execution_tracker.repositories.photo_repo import PhotoRepository
from execution_tracker.repositories.store_repo import StoreRepository, BrandRepository
from execution_tracker.repositories.sync_state_repo import SyncStateRepository

__all__ = [
    "MessageRepository",
    "PhotoRepository",
    "StoreRepository",
    "BrandRepository",
    "SyncStateRepository",
]
