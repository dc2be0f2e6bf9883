"""
Encoding of asset locations into the string stored on a video record.

Video records store ``"<bucket>,<key>"`` in their ``video_url`` column
instead of a URL. Signed URLs expire, so we persist the location and sign
on every read.

The format predates any escaping. Existing rows are decoded by splitting on
the comma and taking the first two segments, so a key containing a comma
would be silently truncated. We keep that behavior for stored rows and
refuse to write new references that would hit it.
"""

import logging
from typing import Optional

from .models import AssetReference

logger = logging.getLogger(__name__)

DELIMITER = ","


class ReferenceDecodeError(Exception):
    """
    Raised when a stored reference doesn't have a bucket and a key.

    This means the stored data is corrupt or wasn't written by
    encode_reference, so it's an integrity problem, not a client error.
    """
    pass


class ReferenceEncodeError(ValueError):
    """Raised when a bucket or key can't be encoded without loss."""
    pass


def encode_reference(bucket: str, key: str) -> str:
    """Encode a bucket and object key as ``"<bucket>,<key>"``."""
    for name, value in (("bucket", bucket), ("key", key)):
        if DELIMITER in value:
            raise ReferenceEncodeError(
                f"Asset {name} cannot contain {DELIMITER!r}: {value!r}"
            )
    return f"{bucket}{DELIMITER}{key}"


def decode_reference(reference: Optional[str]) -> Optional[AssetReference]:
    """
    Decode a stored reference back into a bucket and key.

    ``None`` passes through as ``None``: a video without an asset is a
    normal state.
    """
    if reference is None:
        return None

    components = reference.split(DELIMITER)
    if len(components) < 2 or not components[0] or not components[1]:
        raise ReferenceDecodeError(f"Malformed asset reference: {reference!r}")

    if len(components) > 2:
        logger.warning(
            "Asset reference has extra segments, ignoring them",
            extra={"segments": len(components)}
        )

    return AssetReference(bucket=components[0], key=components[1])
