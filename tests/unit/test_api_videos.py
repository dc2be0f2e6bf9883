"""
Tests for the video API endpoints.

The app runs in mock storage mode with a fresh in-memory repository per
test, wired in through FastAPI dependency overrides.
"""

from datetime import timedelta
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from src.config.settings import Settings, get_settings
from src.core.assets.models import SignedURL
from src.core.videos.models import Video
from src.infrastructure.database.videos import InMemoryVideoRepository
from src.infrastructure.storage.client import MockStorageClient, SigningError, StorageError
from src.api.dependencies import get_storage_client, get_video_repository
from src.main import app

API_KEY = "test-key"
HEADERS = {"X-API-Key": API_KEY, "X-User-Id": "user-1"}


class FailingStorageClient(MockStorageClient):
    """Mock storage whose signing and uploads always fail."""

    async def presign(self, bucket: str, key: str, ttl: timedelta) -> SignedURL:
        raise SigningError("bucket does not exist")

    async def upload_object(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        raise StorageError("connection reset")


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        api_keys=API_KEY,
        s3_bucket="test-bucket",
        s3_mock_mode=True,
        max_upload_size_mb=1,
        max_thumbnail_size_mb=1,
    )


@pytest.fixture
def repository():
    return InMemoryVideoRepository()


@pytest.fixture
def storage():
    return MockStorageClient()


@pytest.fixture
def client(settings, repository, storage):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_video_repository] = lambda: repository
    app.dependency_overrides[get_storage_client] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_video(client, title="My clip") -> dict:
    response = client.post("/api/v1/videos", json={"title": title}, headers=HEADERS)
    assert response.status_code == 201
    return response.json()


class TestAuthentication:
    """Tests for API key checks."""

    def test_missing_key_is_forbidden(self, client):
        response = client.get("/api/v1/videos")
        assert response.status_code == 403

    def test_wrong_key_is_forbidden(self, client):
        response = client.get("/api/v1/videos", headers={"X-API-Key": "nope"})
        assert response.status_code == 403

    def test_health_needs_no_key(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["details"]["mock_mode"]["storage"] is True


class TestVideoRecords:
    """Tests for creating and reading video records."""

    def test_new_video_has_no_url(self, client):
        video = create_video(client)

        assert video["title"] == "My clip"
        assert video["user_id"] == "user-1"
        assert video["video_url"] is None

    def test_get_video_without_file_is_unchanged(self, client):
        video = create_video(client)

        response = client.get(f"/api/v1/videos/{video['id']}", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["video_url"] is None

    def test_get_unknown_video_is_404(self, client):
        response = client.get(
            "/api/v1/videos/00000000-0000-0000-0000-000000000000",
            headers=HEADERS,
        )
        assert response.status_code == 404

    def test_list_only_returns_callers_videos(self, client):
        create_video(client, "Mine")
        client.post(
            "/api/v1/videos",
            json={"title": "Theirs"},
            headers={"X-API-Key": API_KEY, "X-User-Id": "user-2"},
        )

        response = client.get("/api/v1/videos", headers=HEADERS)

        assert [v["title"] for v in response.json()] == ["Mine"]


class TestVideoUpload:
    """Tests for uploading files and reading them back signed."""

    def test_upload_stores_file_and_reference(self, client, repository, storage):
        video = create_video(client)

        response = client.post(
            f"/api/v1/videos/{video['id']}/video",
            files={"video": ("clip.mp4", b"fake-mp4-bytes", "video/mp4")},
            headers=HEADERS,
        )

        assert response.status_code == 200
        signed_url = response.json()["video_url"]
        assert signed_url.startswith("mock://storage/test-bucket/")

        stored = repository.get_video(UUID(video["id"]))
        bucket, key = stored.video_url.split(",")
        assert bucket == "test-bucket"
        assert key.endswith(".mp4")
        assert len(key) == 43 + len(".mp4")
        assert storage.get_object(bucket, key) == (b"fake-mp4-bytes", "video/mp4")

    def test_unknown_content_type_is_stored_as_bin(self, client, repository):
        video = create_video(client)

        client.post(
            f"/api/v1/videos/{video['id']}/video",
            files={"video": ("clip", b"data", "garbage")},
            headers=HEADERS,
        )

        stored = repository.get_video(UUID(video["id"]))
        assert stored.video_url.endswith(".bin")

    def test_each_read_signs_a_fresh_url(self, client):
        video = create_video(client)
        client.post(
            f"/api/v1/videos/{video['id']}/video",
            files={"video": ("clip.mp4", b"data", "video/mp4")},
            headers=HEADERS,
        )

        first = client.get(f"/api/v1/videos/{video['id']}", headers=HEADERS).json()
        second = client.get(f"/api/v1/videos/{video['id']}", headers=HEADERS).json()

        assert first["video_url"] != second["video_url"]
        assert "expires=3600" in first["video_url"]

    def test_non_owner_cannot_upload(self, client):
        video = create_video(client)

        response = client.post(
            f"/api/v1/videos/{video['id']}/video",
            files={"video": ("clip.mp4", b"data", "video/mp4")},
            headers={"X-API-Key": API_KEY, "X-User-Id": "someone-else"},
        )

        assert response.status_code == 403

    def test_oversized_upload_is_rejected(self, client, repository):
        video = create_video(client)

        response = client.post(
            f"/api/v1/videos/{video['id']}/video",
            files={"video": ("big.mp4", b"x" * (1024 * 1024 + 1), "video/mp4")},
            headers=HEADERS,
        )

        assert response.status_code == 413
        assert repository.get_video(UUID(video["id"])).video_url is None

    def test_comma_in_subtype_is_rejected(self, client, repository):
        video = create_video(client)

        response = client.post(
            f"/api/v1/videos/{video['id']}/video",
            files={"video": ("clip", b"data", "video/mp4,evil")},
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert repository.get_video(UUID(video["id"])).video_url is None


class TestThumbnailUpload:
    """Tests for uploading thumbnails and reading them back signed."""

    def test_upload_stores_thumbnail_and_reference(self, client, repository, storage):
        video = create_video(client)

        response = client.post(
            f"/api/v1/videos/{video['id']}/thumbnail",
            files={"thumbnail": ("thumb.png", b"fake-png-bytes", "image/png")},
            headers=HEADERS,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["thumbnail_url"].startswith("mock://storage/test-bucket/")
        assert body["video_url"] is None

        stored = repository.get_video(UUID(video["id"]))
        bucket, key = stored.thumbnail_url.split(",")
        assert bucket == "test-bucket"
        assert key.endswith(".png")
        assert len(key) == 43 + len(".png")
        assert storage.get_object(bucket, key) == (b"fake-png-bytes", "image/png")
        assert stored.video_url is None

    def test_get_signs_both_assets(self, client):
        video = create_video(client)
        client.post(
            f"/api/v1/videos/{video['id']}/video",
            files={"video": ("clip.mp4", b"data", "video/mp4")},
            headers=HEADERS,
        )
        client.post(
            f"/api/v1/videos/{video['id']}/thumbnail",
            files={"thumbnail": ("thumb.png", b"img", "image/png")},
            headers=HEADERS,
        )

        body = client.get(f"/api/v1/videos/{video['id']}", headers=HEADERS).json()

        assert body["video_url"].startswith("mock://storage/test-bucket/")
        assert ".mp4?" in body["video_url"]
        assert body["thumbnail_url"].startswith("mock://storage/test-bucket/")
        assert ".png?" in body["thumbnail_url"]

    def test_non_owner_cannot_upload_thumbnail(self, client, repository):
        video = create_video(client)

        response = client.post(
            f"/api/v1/videos/{video['id']}/thumbnail",
            files={"thumbnail": ("thumb.png", b"img", "image/png")},
            headers={"X-API-Key": API_KEY, "X-User-Id": "someone-else"},
        )

        assert response.status_code == 403
        assert repository.get_video(UUID(video["id"])).thumbnail_url is None

    def test_oversized_thumbnail_is_rejected(self, client, repository):
        video = create_video(client)

        response = client.post(
            f"/api/v1/videos/{video['id']}/thumbnail",
            files={"thumbnail": ("big.png", b"x" * (1024 * 1024 + 1), "image/png")},
            headers=HEADERS,
        )

        assert response.status_code == 413
        assert repository.get_video(UUID(video["id"])).thumbnail_url is None

    def test_thumbnail_for_unknown_video_is_404(self, client):
        response = client.post(
            "/api/v1/videos/00000000-0000-0000-0000-000000000000/thumbnail",
            files={"thumbnail": ("thumb.png", b"img", "image/png")},
            headers=HEADERS,
        )

        assert response.status_code == 404


class TestStorageFailures:
    """Tests for how storage faults reach the client."""

    @pytest.fixture
    def storage(self):
        return FailingStorageClient()

    def test_signing_failure_fails_the_read(self, client, repository):
        """No unsigned or stale URL is ever returned."""
        video = repository.create_video(Video(
            user_id="user-1",
            title="Stored",
            video_url="test-bucket,abc.mp4",
        ))

        response = client.get(f"/api/v1/videos/{video.id}", headers=HEADERS)

        assert response.status_code == 502
        assert "video_url" not in response.json()
        assert repository.get_video(video.id).video_url == "test-bucket,abc.mp4"

    def test_upload_failure_leaves_record_untouched(self, client, repository):
        video = create_video(client)

        response = client.post(
            f"/api/v1/videos/{video['id']}/video",
            files={"video": ("clip.mp4", b"data", "video/mp4")},
            headers=HEADERS,
        )

        assert response.status_code == 502
        assert repository.get_video(UUID(video["id"])).video_url is None

    def test_corrupt_reference_is_a_server_error(self, client, repository):
        video = repository.create_video(Video(
            user_id="user-1",
            title="Corrupt",
            video_url="no-delimiter-here",
        ))

        response = client.get(f"/api/v1/videos/{video.id}", headers=HEADERS)

        assert response.status_code == 500


class TestRandomSourceFailure:
    """Tests for uploads when the OS can't provide entropy."""

    def test_upload_fails_and_server_keeps_serving(self, client, repository, monkeypatch):
        """Only the affected request fails; the record and the app are intact."""
        video = create_video(client)

        def broken_source(n):
            raise OSError("getrandom failed")

        monkeypatch.setattr("src.core.assets.identifiers.secrets.token_bytes", broken_source)
        failing_client = TestClient(app, raise_server_exceptions=False)

        response = failing_client.post(
            f"/api/v1/videos/{video['id']}/video",
            files={"video": ("clip.mp4", b"data", "video/mp4")},
            headers=HEADERS,
        )

        assert response.status_code == 500
        assert repository.get_video(UUID(video["id"])).video_url is None

        follow_up = failing_client.get(f"/api/v1/videos/{video['id']}", headers=HEADERS)
        assert follow_up.status_code == 200
        assert follow_up.json()["video_url"] is None
