"""
Asset resolution for video records.

Writes and reads meet here:
- On upload, we generate a fresh object key and encode where it went.
- On read, we decode the stored reference and sign a short-lived URL.

The resolver holds configuration and a signing client, nothing else, so a
single instance can serve concurrent requests.
"""

import dataclasses
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from ..videos.models import Video
from .identifiers import generate_identifier
from .media_types import media_type_to_ext
from .models import ObjectKey, SignedURL
from .references import decode_reference, encode_reference

logger = logging.getLogger(__name__)

DEFAULT_URL_TTL = timedelta(hours=1)
MIN_URL_TTL = timedelta(seconds=1)


class PresignedURLProvider(Protocol):
    """
    Anything that can sign a GET URL for an object.

    Implementations raise SigningError on failure and must not retry or
    cache: every call signs a new URL.
    """

    async def presign(
        self,
        bucket: str,
        key: str,
        ttl: timedelta,
    ) -> SignedURL:
        ...


@dataclass(frozen=True)
class AssetConfig:
    """Immutable settings for asset resolution."""
    bucket: str
    url_ttl: timedelta = DEFAULT_URL_TTL

    def __post_init__(self) -> None:
        if not self.bucket:
            raise ValueError("Asset bucket cannot be empty")
        # Presigning works in whole seconds.
        if self.url_ttl < MIN_URL_TTL:
            raise ValueError("Signed URL lifetime must be at least one second")


class AssetResolver:
    """Turns content types into object keys and stored references into URLs."""

    def __init__(self, config: AssetConfig, url_provider: PresignedURLProvider) -> None:
        self._config = config
        self._url_provider = url_provider

    @property
    def bucket(self) -> str:
        return self._config.bucket

    def materialize_for_write(self, content_type: str) -> ObjectKey:
        """
        Generate the object key for a new upload.

        Raises RandomSourceError if no entropy is available.
        """
        identifier = generate_identifier()
        extension = media_type_to_ext(content_type)
        return ObjectKey(identifier=identifier, extension=extension[1:])

    def reference_for(self, key: ObjectKey) -> str:
        """Encode the reference to persist for an object in our bucket."""
        return encode_reference(self._config.bucket, key.name)

    async def resolve_for_read(self, video: Video) -> Video:
        """
        Return a copy of ``video`` with a freshly signed ``video_url``.

        Videos without an uploaded file come back as-is. If signing fails
        the error propagates; the input record is never modified.
        """
        if not video.has_video:
            return video

        signed_url = await self._sign(video, video.video_url)
        return dataclasses.replace(video, video_url=signed_url)

    async def resolve_thumbnail_for_read(self, video: Video) -> Video:
        """Same as resolve_for_read, for ``thumbnail_url``."""
        if not video.has_thumbnail:
            return video

        signed_url = await self._sign(video, video.thumbnail_url)
        return dataclasses.replace(video, thumbnail_url=signed_url)

    async def _sign(self, video: Video, stored: str) -> str:
        reference = decode_reference(stored)

        signed = await self._url_provider.presign(
            reference.bucket,
            reference.key,
            self._config.url_ttl,
        )

        logger.debug(
            "Signed asset URL",
            extra={
                "video_id": str(video.id),
                "bucket": reference.bucket,
                "expires_at": signed.expires_at.isoformat(),
            }
        )

        return signed.url
