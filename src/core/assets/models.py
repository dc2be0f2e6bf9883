"""
Value objects for stored assets.

These are deliberately small and frozen. An asset is just a location in the
object store; everything else (who owns it, which video it belongs to)
lives on the video record.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AssetReference:
    """Where an asset lives: a bucket and an object key inside it."""
    bucket: str
    key: str

    def __post_init__(self) -> None:
        if not self.bucket:
            raise ValueError("Asset bucket cannot be empty")
        if not self.key:
            raise ValueError("Asset key cannot be empty")


@dataclass(frozen=True)
class ObjectKey:
    """
    A freshly generated name for an object we're about to upload.

    ``extension`` is stored without the leading dot.
    """
    identifier: str
    extension: str

    @property
    def name(self) -> str:
        """The full object key: ``<identifier>.<extension>``."""
        return f"{self.identifier}.{self.extension}"


@dataclass(frozen=True)
class SignedURL:
    """A time-limited URL for an object. Never persisted."""
    url: str
    expires_at: datetime
