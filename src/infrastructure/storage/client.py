"""
Object storage client for video assets.

Supports any S3-compatible store (AWS S3, R2, MinIO) with a mock mode for
local development.

Two operations matter to the rest of the app:
- upload_object: put bytes at a key
- presign: sign a time-limited GET URL for a key

Mock mode stores objects in memory and hands out mock:// URLs, enabling
API testing without provisioning a bucket.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol
from uuid import uuid4

from ...core.assets.models import SignedURL

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


class SigningError(StorageError):
    """
    Raised when a presigned URL can't be produced.

    Covers bad credentials, unknown buckets, and client faults. Never
    retried here; the caller decides what the request should return.
    """
    pass


@dataclass
class StorageConfig:
    """Configuration for S3-compatible storage."""
    bucket_name: str
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None


class StorageClient(Protocol):
    """
    Protocol for object storage operations.

    Using a protocol means tests can provide mocks and we can
    swap storage backends without changing dependent code.
    """

    async def upload_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
    ) -> None:
        """Store bytes at bucket/key."""
        ...

    async def presign(
        self,
        bucket: str,
        key: str,
        ttl: timedelta,
    ) -> SignedURL:
        """Sign a GET URL for bucket/key valid for ttl."""
        ...


class S3StorageClient:
    """
    S3-compatible object storage client.

    boto3 is synchronous, so each call runs in a worker thread. One slow
    upload or signing call doesn't hold up other requests on the event
    loop.

    Retries are switched off. A failed call surfaces once as a
    StorageError and the request fails with it.
    """

    def __init__(self, config: StorageConfig) -> None:
        import boto3
        from botocore.config import Config

        self._config = config

        boto_config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
            retries={"max_attempts": 1, "mode": "standard"},
        )

        self._s3_client = boto3.client(
            "s3",
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url or "aws",
            }
        )

    async def upload_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
    ) -> None:
        """Upload bytes with their content type."""
        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except Exception as e:
            logger.error(
                "Failed to upload object",
                extra={"bucket": bucket, "key": key, "error": str(e)}
            )
            raise StorageError(f"Upload failed: {e}") from e

        logger.info(
            "Uploaded object",
            extra={"bucket": bucket, "key": key, "size_bytes": len(data)}
        )

    async def presign(
        self,
        bucket: str,
        key: str,
        ttl: timedelta,
    ) -> SignedURL:
        """
        Generate a presigned GET URL.

        The signature itself is computed by botocore. We only pick the
        bucket, key and lifetime, and report what comes back.
        """
        expires_in = int(ttl.total_seconds())
        issued_at = datetime.now(timezone.utc)

        try:
            url = await asyncio.to_thread(
                self._s3_client.generate_presigned_url,
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except Exception as e:
            logger.error(
                "Failed to generate presigned URL",
                extra={"bucket": bucket, "key": key, "error": str(e)}
            )
            raise SigningError(f"Presigned URL generation failed: {e}") from e

        return SignedURL(url=url, expires_at=issued_at + timedelta(seconds=expires_in))


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory storage for local development.

    Objects are kept in a dictionary keyed by (bucket, key) and "URLs" are
    mock URIs carrying a nonce, so every signing call returns a new string
    just like real presigning does.

    Not suitable for production, but perfect for development and testing.
    """

    def __init__(self) -> None:
        self._objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        logger.info("Initialized mock storage client (in-memory)")

    async def upload_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
    ) -> None:
        """Store object in memory."""
        self._objects[(bucket, key)] = (data, content_type)

        logger.debug(
            "Stored object in mock storage",
            extra={"bucket": bucket, "key": key, "size_bytes": len(data)}
        )

    async def presign(
        self,
        bucket: str,
        key: str,
        ttl: timedelta,
    ) -> SignedURL:
        """Return a mock URL for the object."""
        expires_in = int(ttl.total_seconds())
        return SignedURL(
            url=f"mock://storage/{bucket}/{key}?expires={expires_in}&nonce={uuid4().hex}",
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )

    def get_object(self, bucket: str, key: str) -> tuple[bytes, str]:
        """Return stored bytes and content type. Test helper."""
        if (bucket, key) not in self._objects:
            raise StorageError(f"Object not found: {bucket}/{key}")
        return self._objects[(bucket, key)]


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> StorageClient:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        StorageClient implementation (S3 or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3StorageClient(config)
