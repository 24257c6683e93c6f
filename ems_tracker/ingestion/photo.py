"""
Equipment photo embedding.

Photos are stored inline on the rider as a ``data:`` URI, exactly as the
browser app's file reader produced them. There is no size or type check:
any file is accepted, and the MIME type is guessed from its name.
"""

from __future__ import annotations

import base64
import logging
import mimetypes
from pathlib import Path

logger = logging.getLogger(__name__)

FALLBACK_MIME_TYPE = "application/octet-stream"


def encode_data_uri(content: bytes, mime_type: str = FALLBACK_MIME_TYPE) -> str:
    """Return ``data:<mime_type>;base64,<content>``."""
    payload = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def read_photo(path: Path) -> str:
    """Read an image file and return it as an embedded ``data:`` URI.

    Args:
        path: Image file path.

    Returns:
        The data URI string to store in ``Rider.equipment_photo``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"Photo file not found: {path}")

    mime_type, _ = mimetypes.guess_type(path.name)
    content = path.read_bytes()
    logger.debug("Embedding photo %s (%d bytes, %s)", path.name, len(content), mime_type)
    return encode_data_uri(content, mime_type or FALLBACK_MIME_TYPE)
