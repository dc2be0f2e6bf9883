"""Video records as seen by the asset layer."""

from .models import Video

__all__ = ["Video"]
