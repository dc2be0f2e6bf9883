"""Video metadata persistence."""

from .videos import InMemoryVideoRepository, VideoNotFoundError, VideoRepository

__all__ = ["InMemoryVideoRepository", "VideoNotFoundError", "VideoRepository"]
