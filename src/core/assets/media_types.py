"""Content-type to file extension mapping."""

from typing import Optional

DEFAULT_EXTENSION = ".bin"


def media_type_to_ext(content_type: Optional[str]) -> str:
    """
    Map a MIME type like ``image/png`` to an extension like ``.png``.

    Anything that isn't exactly ``type/subtype`` maps to ``.bin`` instead of
    failing the upload. The subtype is used verbatim, parameters included
    (``video/mp4; codecs=avc1`` gives ``.mp4; codecs=avc1``).
    """
    parts = (content_type or "").split("/")
    if len(parts) != 2:
        return DEFAULT_EXTENSION
    return "." + parts[1]
