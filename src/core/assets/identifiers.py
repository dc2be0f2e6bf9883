"""
Opaque identifiers for uploaded assets.

Every object we write to the store is named by a random token rather than
anything derived from the upload (filename, user, video id). Random names
can't be guessed or enumerated, and they never collide in practice, so we
don't check the bucket before writing.
"""

import base64
import secrets

IDENTIFIER_BYTES = 32

# 32 bytes of URL-safe base64 with the padding stripped
IDENTIFIER_LENGTH = 43


class RandomSourceError(Exception):
    """
    Raised when the OS random source can't provide entropy.

    Fatal for the operation that needed the identifier. We never fall back
    to a weaker generator: predictable names would be collidable names.
    """
    pass


def generate_identifier() -> str:
    """
    Generate a 43-character URL-safe identifier from 32 random bytes.

    The alphabet is [A-Za-z0-9_-] so the identifier can sit unescaped in a
    path segment or object key.
    """
    try:
        raw = secrets.token_bytes(IDENTIFIER_BYTES)
    except (OSError, NotImplementedError) as e:
        raise RandomSourceError(f"Random source unavailable: {e}") from e

    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")
