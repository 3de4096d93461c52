# Blob storage module
from execution_tracker.integrations.storage.blob_store import BlobStore, build_blob_store

__all__ = ["BlobStore", "build_blob_store"]
