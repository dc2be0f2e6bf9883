"""
Repository for video records.

The metadata store is an external collaborator: the asset layer only needs
to fetch a record and save it back with a new reference. The repository
protocol captures exactly that, and the in-memory implementation backs
local development and tests.
"""

import copy
import logging
import threading
from typing import Optional, Protocol
from uuid import UUID

from src.core.videos.models import Video

logger = logging.getLogger(__name__)


class VideoNotFoundError(Exception):
    """Raised when a requested video doesn't exist."""
    pass


class VideoRepository(Protocol):
    """
    Protocol for video metadata persistence.

    - create_video: Persist a new record
    - get_video: Load a record by ID
    - list_videos: Records for a user, newest first
    - update_video: Replace a stored record
    """

    def create_video(self, video: Video) -> Video: ...
    def get_video(self, video_id: UUID) -> Video: ...
    def list_videos(self, user_id: Optional[str] = None) -> list[Video]: ...
    def update_video(self, video: Video) -> None: ...


class InMemoryVideoRepository:
    """
    Video repository backed by a dictionary.

    Records are copied on the way in and out, so callers can't change
    stored state by mutating what they got back. That mirrors how a real
    database behaves and keeps read paths honest.
    """

    def __init__(self) -> None:
        self._videos: dict[UUID, Video] = {}
        self._lock = threading.Lock()

    def create_video(self, video: Video) -> Video:
        with self._lock:
            self._videos[video.id] = copy.deepcopy(video)

        logger.info(
            "Created video",
            extra={"video_id": str(video.id), "user_id": video.user_id}
        )
        return copy.deepcopy(video)

    def get_video(self, video_id: UUID) -> Video:
        with self._lock:
            video = self._videos.get(video_id)

        if video is None:
            raise VideoNotFoundError(f"Video {video_id} not found")
        return copy.deepcopy(video)

    def list_videos(self, user_id: Optional[str] = None) -> list[Video]:
        with self._lock:
            videos = [
                copy.deepcopy(v) for v in self._videos.values()
                if user_id is None or v.user_id == user_id
            ]
        return sorted(videos, key=lambda v: v.created_at, reverse=True)

    def update_video(self, video: Video) -> None:
        with self._lock:
            if video.id not in self._videos:
                raise VideoNotFoundError(f"Video {video.id} not found")
            self._videos[video.id] = copy.deepcopy(video)

        logger.debug("Updated video", extra={"video_id": str(video.id)})
