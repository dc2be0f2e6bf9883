"""
Asset addressing and retrieval.

Contains identifier generation, content-type mapping, the stored reference
format, and the resolver that ties them to a URL signer.
"""

from .identifiers import RandomSourceError, generate_identifier
from .media_types import media_type_to_ext
from .models import AssetReference, ObjectKey, SignedURL
from .references import (
    ReferenceDecodeError,
    ReferenceEncodeError,
    decode_reference,
    encode_reference,
)
from .resolver import AssetConfig, AssetResolver, PresignedURLProvider

__all__ = [
    "AssetConfig",
    "AssetReference",
    "AssetResolver",
    "ObjectKey",
    "PresignedURLProvider",
    "RandomSourceError",
    "ReferenceDecodeError",
    "ReferenceEncodeError",
    "SignedURL",
    "decode_reference",
    "encode_reference",
    "generate_identifier",
    "media_type_to_ext",
]
