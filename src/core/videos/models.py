"""
Video record model.

The record itself belongs to the metadata store. The asset code only ever
reads it and hands back a modified copy, so the dataclass is plain and
mutable like the rows it mirrors.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Video:
    """
    A user's video and its metadata.

    ``video_url`` holds an encoded asset reference (``"<bucket>,<key>"``)
    while stored, and a signed URL only in responses. ``None`` means no
    file has been uploaded yet. ``thumbnail_url`` follows the same rules.
    """
    user_id: str
    title: str
    description: str = ""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("Video title cannot be empty")

    @property
    def has_video(self) -> bool:
        return bool(self.video_url)

    @property
    def has_thumbnail(self) -> bool:
        return bool(self.thumbnail_url)

    def touch(self) -> None:
        """Mark the record as modified now."""
        self.updated_at = _utcnow()
