"""
Video API endpoints.

Video records store where their file lives, never a URL. Every read signs
a fresh, time-limited URL so clients can fetch the file straight from the
object store without routing bytes through this API.

Flow:
1. Create a video record (metadata only)
2. Upload the file → stored under a random key, reference saved on the record
3. Optionally upload a thumbnail the same way
4. Read the record → references swapped for signed URLs in the response
"""

import logging
from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, File, Header, HTTPException, UploadFile, status
from pydantic import BaseModel, Field

from ...core.assets.references import ReferenceDecodeError, ReferenceEncodeError
from ...core.assets.resolver import AssetResolver
from ...core.videos.models import Video
from ...infrastructure.database.videos import VideoNotFoundError, VideoRepository
from ...infrastructure.storage.client import StorageClient, StorageError
from ..dependencies import (
    AssetResolverDep,
    AuthenticatedUser,
    SettingsDep,
    StorageClientDep,
    VideoRepositoryDep,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ANONYMOUS_USER = "anonymous"


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class VideoCreateRequest(BaseModel):
    """Request to create a video record."""
    title: str = Field(description="Video title", min_length=1, max_length=200)
    description: str = Field(default="", description="Video description", max_length=5000)


class VideoResponse(BaseModel):
    """A video record as returned to clients."""
    id: UUID = Field(description="Video identifier")
    user_id: str = Field(description="Owner of the video")
    title: str = Field(description="Video title")
    description: str = Field(description="Video description")
    created_at: datetime = Field(description="When the record was created")
    updated_at: datetime = Field(description="Last update time")
    thumbnail_url: Optional[str] = Field(
        None,
        description="Signed, time-limited URL for the thumbnail. Null until one is uploaded.",
    )
    video_url: Optional[str] = Field(
        None,
        description="Signed, time-limited URL for the video file. Null until a file is uploaded.",
    )

    @classmethod
    def from_video(cls, video: Video) -> "VideoResponse":
        return cls(
            id=video.id,
            user_id=video.user_id,
            title=video.title,
            description=video.description,
            created_at=video.created_at,
            updated_at=video.updated_at,
            thumbnail_url=video.thumbnail_url,
            video_url=video.video_url,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_video(repository: VideoRepository, video_id: UUID) -> Video:
    try:
        return repository.get_video(video_id)
    except VideoNotFoundError:
        logger.warning("Video not found", extra={"video_id": str(video_id)})
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Video not found",
        )


async def _signed(resolver: AssetResolver, video: Video) -> VideoResponse:
    """
    Resolve a stored record into a response with signed URLs.

    A signing failure fails the request. We never fall back to returning
    the stored reference or an old URL.
    """
    try:
        resolved = await resolver.resolve_for_read(video)
        resolved = await resolver.resolve_thumbnail_for_read(resolved)
    except ReferenceDecodeError as e:
        logger.error(
            "Stored asset reference is corrupt",
            extra={"video_id": str(video.id), "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Stored asset reference is invalid",
        )
    except StorageError as e:
        logger.error(
            "Failed to sign asset URL",
            extra={"video_id": str(video.id), "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Couldn't generate asset URL",
        )

    return VideoResponse.from_video(resolved)


async def _store_asset(
    record: Video,
    upload: UploadFile,
    max_bytes: int,
    user_id: Optional[str],
    storage: StorageClient,
    resolver: AssetResolver,
) -> str:
    """
    Check ownership and size, upload under a fresh key, return the reference.

    The record is not modified; the caller decides which field to set.
    """
    if record.user_id != (user_id or ANONYMOUS_USER):
        logger.warning(
            "Upload attempted by non-owner",
            extra={"video_id": str(record.id)}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You're not the owner of the video",
        )

    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {max_bytes // (1024 * 1024)} MB limit",
        )

    content_type = upload.content_type or ""
    object_key = resolver.materialize_for_write(content_type)

    try:
        reference = resolver.reference_for(object_key)
    except ReferenceEncodeError as e:
        logger.warning(
            "Rejected unencodable object key",
            extra={"video_id": str(record.id), "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported content type",
        )

    try:
        await storage.upload_object(resolver.bucket, object_key.name, data, content_type)
    except StorageError as e:
        logger.error(
            "Asset upload failed",
            extra={"video_id": str(record.id), "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Couldn't upload file",
        )

    logger.info(
        "Asset uploaded",
        extra={
            "video_id": str(record.id),
            "object_key": object_key.name,
            "size_bytes": len(data),
        }
    )

    return reference


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a video record",
)
async def create_video(
    request: VideoCreateRequest,
    api_key: AuthenticatedUser,
    repository: VideoRepositoryDep,
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> VideoResponse:
    """Create a video record with no file attached yet."""
    video = repository.create_video(Video(
        user_id=x_user_id or ANONYMOUS_USER,
        title=request.title,
        description=request.description,
    ))
    return VideoResponse.from_video(video)


@router.get(
    "",
    response_model=list[VideoResponse],
    status_code=status.HTTP_200_OK,
    summary="List videos",
    description="List the caller's videos, each with a freshly signed URL",
)
async def list_videos(
    api_key: AuthenticatedUser,
    repository: VideoRepositoryDep,
    resolver: AssetResolverDep,
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> list[VideoResponse]:
    videos = repository.list_videos(user_id=x_user_id or ANONYMOUS_USER)
    return [await _signed(resolver, video) for video in videos]


@router.get(
    "/{video_id}",
    response_model=VideoResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a video",
)
async def get_video(
    video_id: UUID,
    api_key: AuthenticatedUser,
    repository: VideoRepositoryDep,
    resolver: AssetResolverDep,
) -> VideoResponse:
    """Get a video with a signed URL valid for the configured lifetime."""
    video = _load_video(repository, video_id)
    return await _signed(resolver, video)



@router.post(
    "/{video_id}/video",
    response_model=VideoResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload the video file",
    description="Store the file under a new random key and attach it to the video",
)
async def upload_video(
    video_id: UUID,
    api_key: AuthenticatedUser,
    settings: SettingsDep,
    repository: VideoRepositoryDep,
    storage: StorageClientDep,
    resolver: AssetResolverDep,
    video: Annotated[UploadFile, File()],
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> VideoResponse:
    """
    Upload a video file.

    The object key is random, so re-uploading never overwrites the
    previous file; the record simply points at the new one.
    """
    record = _load_video(repository, video_id)
    reference = await _store_asset(
        record, video, settings.max_upload_size_bytes, x_user_id, storage, resolver,
    )

    record.video_url = reference
    record.touch()
    repository.update_video(record)

    return await _signed(resolver, record)


@router.post(
    "/{video_id}/thumbnail",
    response_model=VideoResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload a thumbnail",
    description="Store the image under a new random key and attach it to the video",
)
async def upload_thumbnail(
    video_id: UUID,
    api_key: AuthenticatedUser,
    settings: SettingsDep,
    repository: VideoRepositoryDep,
    storage: StorageClientDep,
    resolver: AssetResolverDep,
    thumbnail: Annotated[UploadFile, File()],
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> VideoResponse:
    """
    Upload a thumbnail image.

    Thumbnails live in the same bucket as videos and are signed on read
    the same way.
    """
    record = _load_video(repository, video_id)
    reference = await _store_asset(
        record, thumbnail, settings.max_thumbnail_size_bytes, x_user_id, storage, resolver,
    )

    record.thumbnail_url = reference
    record.touch()
    repository.update_video(record)

    return await _signed(resolver, record)
