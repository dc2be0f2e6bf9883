"""
Tests for the storage clients.

Presigning is computed locally by botocore, so the S3 client can sign with
dummy credentials and no network. Uploads go through botocore's Stubber.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import NoCredentialsError
from botocore.stub import Stubber

from src.infrastructure.storage.client import (
    MockStorageClient,
    S3StorageClient,
    SigningError,
    StorageConfig,
    StorageError,
    create_storage_client,
)


@pytest.fixture
def s3_client():
    return S3StorageClient(StorageConfig(
        bucket_name="my-bucket",
        region="us-east-1",
        endpoint_url="https://s3.example.com",
        access_key_id="testing",
        secret_access_key="testing",
    ))


class TestS3Presign:
    """Tests for presigned GET URLs."""

    @pytest.mark.asyncio
    async def test_url_points_at_bucket_and_key(self, s3_client):
        signed = await s3_client.presign("my-bucket", "videos/abc123.mp4", timedelta(hours=1))

        assert signed.url.startswith("https://s3.example.com/my-bucket/videos/abc123.mp4?")
        assert "X-Amz-Expires=3600" in signed.url
        assert "X-Amz-Signature=" in signed.url

    @pytest.mark.asyncio
    async def test_expiry_matches_ttl(self, s3_client):
        before = datetime.now(timezone.utc)

        signed = await s3_client.presign("my-bucket", "k.mp4", timedelta(minutes=10))

        assert "X-Amz-Expires=600" in signed.url
        assert before + timedelta(minutes=10) <= signed.expires_at
        assert signed.expires_at <= datetime.now(timezone.utc) + timedelta(minutes=10)

    @pytest.mark.asyncio
    async def test_signing_failure_raises_signing_error(self, s3_client):
        s3_client._s3_client = MagicMock()
        s3_client._s3_client.generate_presigned_url.side_effect = NoCredentialsError()

        with pytest.raises(SigningError, match="Presigned URL generation failed"):
            await s3_client.presign("my-bucket", "k.mp4", timedelta(hours=1))

    @pytest.mark.asyncio
    async def test_signing_failure_is_not_retried(self, s3_client):
        s3_client._s3_client = MagicMock()
        s3_client._s3_client.generate_presigned_url.side_effect = NoCredentialsError()

        with pytest.raises(SigningError):
            await s3_client.presign("my-bucket", "k.mp4", timedelta(hours=1))

        assert s3_client._s3_client.generate_presigned_url.call_count == 1

    def test_signing_error_is_a_storage_error(self):
        assert issubclass(SigningError, StorageError)


class TestS3Upload:
    """Tests for object uploads."""

    @pytest.mark.asyncio
    async def test_upload_puts_object_with_content_type(self, s3_client):
        with Stubber(s3_client._s3_client) as stubber:
            stubber.add_response(
                "put_object",
                {},
                expected_params={
                    "Bucket": "my-bucket",
                    "Key": "abc.mp4",
                    "Body": b"video-bytes",
                    "ContentType": "video/mp4",
                },
            )

            await s3_client.upload_object("my-bucket", "abc.mp4", b"video-bytes", "video/mp4")

            stubber.assert_no_pending_responses()

    @pytest.mark.asyncio
    async def test_upload_failure_raises_storage_error(self, s3_client):
        with Stubber(s3_client._s3_client) as stubber:
            stubber.add_client_error("put_object", service_error_code="NoSuchBucket")

            with pytest.raises(StorageError, match="Upload failed"):
                await s3_client.upload_object("missing", "abc.mp4", b"x", "video/mp4")


class TestMockStorageClient:
    """Tests for the in-memory client used in development."""

    @pytest.mark.asyncio
    async def test_upload_stores_bytes_and_type(self):
        client = MockStorageClient()

        await client.upload_object("b", "k.mp4", b"data", "video/mp4")

        assert client.get_object("b", "k.mp4") == (b"data", "video/mp4")

    def test_missing_object_raises(self):
        with pytest.raises(StorageError, match="not found"):
            MockStorageClient().get_object("b", "nope")

    @pytest.mark.asyncio
    async def test_each_presign_is_fresh(self):
        """Two calls in the same window give different URLs."""
        client = MockStorageClient()

        first = await client.presign("b", "k.mp4", timedelta(hours=1))
        second = await client.presign("b", "k.mp4", timedelta(hours=1))

        assert first.url != second.url
        assert first.url.startswith("mock://storage/b/k.mp4?expires=3600")


class TestCreateStorageClient:
    """Tests for the storage factory."""

    def test_mock_mode_returns_mock(self):
        assert isinstance(create_storage_client(mock_mode=True), MockStorageClient)

    def test_real_mode_requires_config(self):
        with pytest.raises(ValueError, match="config is required"):
            create_storage_client()

    def test_real_mode_returns_s3_client(self):
        client = create_storage_client(config=StorageConfig(
            bucket_name="b",
            access_key_id="testing",
            secret_access_key="testing",
        ))
        assert isinstance(client, S3StorageClient)
