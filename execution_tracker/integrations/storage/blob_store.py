"""
Blob Store

Stores imported images in an S3-compatible bucket (MinIO client) and
returns the public URL the review UI loads them from.
"""

from io import BytesIO
from typing import Optional
from urllib.parse import quote
import asyncio
import logging

from minio import Minio
from minio.error import S3Error

from execution_tracker.config import Settings
from execution_tracker.errors import BlobStoreError

logger = logging.getLogger(__name__)


class BlobStore:
    """
    Object storage for imported photos.

    Uploads overwrite any existing object with the same name, so storing
    the same attachment twice is harmless.
    """

    def __init__(self, client: Minio, bucket: str, public_base_url: str):
        self.client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self._bucket_ready = False

    def public_url(self, name: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{quote(name)}"

    def ensure_bucket(self) -> None:
        """Create the bucket on first use if it does not exist."""
        if self._bucket_ready:
            return
        if not self.client.bucket_exists(self.bucket):
            logger.info(f"Creating bucket {self.bucket}")
            self.client.make_bucket(self.bucket)
        self._bucket_ready = True

    def _put(self, name: str, data: bytes, content_type: str) -> None:
        self.ensure_bucket()
        self.client.put_object(
            self.bucket,
            name,
            BytesIO(data),
            length=len(data),
            content_type=content_type,
        )

    async def upload(self, name: str, data: bytes, content_type: Optional[str]) -> str:
        """
        Upload bytes under `name` and return the object's public URL.

        Raises:
            BlobStoreError: If the object could not be written
        """
        content_type = content_type or "application/octet-stream"
        try:
            await asyncio.to_thread(self._put, name, data, content_type)
        except S3Error as e:
            logger.error(f"Storage error uploading {name}: {e.code}")
            raise BlobStoreError(f"Upload failed: {e.code}: {e.message}") from e
        except Exception as e:
            logger.error(f"Error uploading {name}: {e}")
            raise BlobStoreError(f"Upload failed: {e}") from e

        logger.debug(f"Uploaded {name} ({len(data)} bytes, {content_type})")
        return self.public_url(name)


def build_blob_store(settings: Settings) -> BlobStore:
    """Create a BlobStore from settings. The public URL defaults to the API endpoint."""
    client = Minio(
        endpoint=settings.minio_endpoint,
        access_key=settings.minio_access_key,
        secret_key=settings.minio_secret_key,
        secure=settings.minio_secure,
    )
    scheme = "https" if settings.minio_secure else "http"
    public_base_url = settings.minio_public_base_url or f"{scheme}://{settings.minio_endpoint}"
    return BlobStore(client, settings.minio_bucket, public_base_url)
