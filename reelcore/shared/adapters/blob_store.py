"""
Blob store adapter - media bytes in S3-compatible object storage.

Provides:
- Upload of reel videos and thumbnails under generated keys
- Existence checks used by the reconciliation pipeline
- Best-effort deletion when a reel is permanently deleted

Error contract:
===============
    exists(ref)  → True / False on a definitive answer
                 → raises UpstreamUnavailableError when the store cannot say
                   (timeouts, throttling, 5xx, connection errors)
    delete(ref)  → raises UpstreamUnavailableError on failure; callers log it

boto3 is blocking, so every call is moved off the event loop with
``asyncio.to_thread``.
"""

import asyncio
import time
import uuid
from typing import Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from reelcore.config.settings import settings
from reelcore.shared.core.exceptions import UpstreamUnavailableError
from reelcore.shared.core.logging import get_logger


logger = get_logger(__name__)


# S3 error codes that mean "this object does not exist"
NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class BlobStore(Protocol):
    """Operations the engine needs from the media store."""

    async def upload(self, data: bytes, *, kind: str, content_type: Optional[str] = None) -> str:
        ...

    async def exists(self, ref: str) -> bool:
        ...

    async def delete(self, ref: str) -> None:
        ...


def generate_key(kind: str) -> str:
    """
    Build a unique object key.

    Example:
        generate_key("video") → "videos/video_1767225600000_3f9a1c2b"
    """
    millis = int(time.time() * 1000)
    return f"{kind}s/{kind}_{millis}_{uuid.uuid4().hex[:8]}"


class S3BlobStore:
    """
    Adapter for S3 (or MinIO / LocalStack via BLOB_ENDPOINT_URL).

    Handles:
    - Uploading media under videos/ and thumbnails/
    - HEAD requests for existence checks
    - Deleting objects
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.bucket = bucket or settings.BLOB_BUCKET
        self.region = region or settings.AWS_REGION
        self.endpoint_url = endpoint_url or settings.BLOB_ENDPOINT_URL or None
        self.aws_access_key_id = aws_access_key_id or settings.AWS_ACCESS_KEY_ID
        self.aws_secret_access_key = aws_secret_access_key or settings.AWS_SECRET_ACCESS_KEY
        self.timeout_seconds = timeout_seconds or settings.BLOB_CHECK_TIMEOUT_SECONDS
        self._client = None

    @property
    def client(self):
        """Lazy-loaded S3 client."""
        if self._client is None:
            config = Config(
                connect_timeout=self.timeout_seconds,
                read_timeout=self.timeout_seconds,
                retries={"max_attempts": 2, "mode": "standard"},
            )
            if self.aws_access_key_id and self.aws_secret_access_key:
                self._client = boto3.client(
                    "s3",
                    region_name=self.region,
                    endpoint_url=self.endpoint_url,
                    aws_access_key_id=self.aws_access_key_id,
                    aws_secret_access_key=self.aws_secret_access_key,
                    config=config,
                )
            else:
                # Default credential chain (IAM role, environment, etc.)
                self._client = boto3.client(
                    "s3",
                    region_name=self.region,
                    endpoint_url=self.endpoint_url,
                    config=config,
                )
        return self._client

    async def upload(self, data: bytes, *, kind: str, content_type: Optional[str] = None) -> str:
        """
        Store bytes under a fresh key.

        Args:
            data: File contents
            kind: "video" or "thumbnail"; decides the key prefix
            content_type: MIME type stored with the object

        Returns:
            The object key (the reel's media_ref / thumbnail_ref)
        """
        key = generate_key(kind)
        params = {"Bucket": self.bucket, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type

        try:
            await asyncio.to_thread(self.client.put_object, **params)
        except (ClientError, BotoCoreError) as e:
            logger.error("Blob upload failed", key=key, error=str(e))
            raise UpstreamUnavailableError("blob_store", f"Upload failed: {e}")

        logger.info("Blob uploaded", key=key, size=len(data))
        return key

    async def exists(self, ref: str) -> bool:
        """
        HEAD the object.

        Raises:
            UpstreamUnavailableError: Anything other than found / not found
        """
        try:
            await asyncio.to_thread(self.client.head_object, Bucket=self.bucket, Key=ref)
            return True
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in NOT_FOUND_CODES:
                return False
            raise UpstreamUnavailableError("blob_store", f"Existence check failed: {code}")
        except BotoCoreError as e:
            raise UpstreamUnavailableError("blob_store", f"Existence check failed: {e}")

    async def delete(self, ref: str) -> None:
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=ref)
        except (ClientError, BotoCoreError) as e:
            raise UpstreamUnavailableError("blob_store", f"Delete failed: {e}")
        logger.info("Blob deleted", key=ref)
