"""
Image encoding for model requests.
Turns a photo or gallery image into a base64 payload tagged with its MIME type.
"""

import base64
import logging
import mimetypes
from pathlib import Path
from typing import BinaryIO, Optional, Union

from card_creator.errors import EncodingError
from card_creator.structures import EncodedImage

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"

ImageSource = Union[str, Path, bytes, bytearray, BinaryIO]

_SIGNATURES = [
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
]


def strip_data_url(value) -> str:
    """Remove a ``data:<mime>;base64,`` prefix from an encoded string."""
    if not isinstance(value, str):
        raise EncodingError("Failed to read file as base64 string.")
    if value.startswith("data:") and "," in value:
        return value.split(",", 1)[1]
    return value


def detect_mime_type(content: bytes, filename: Optional[str] = None) -> str:
    """Guess the MIME type from magic bytes, then from the file extension."""
    for signature, mime_type in _SIGNATURES:
        if content.startswith(signature):
            return mime_type
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "image/webp"

    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed and guessed.startswith("image/"):
            return guessed

    return DEFAULT_MIME_TYPE


def _read_source(source: ImageSource) -> tuple:
    """Read the whole resource into memory, returning (bytes, filename)."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), None

    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            return path.read_bytes(), path.name
        except (OSError, ValueError) as e:
            raise EncodingError(f"Could not read image '{path}': {e}") from e

    if hasattr(source, "read"):
        try:
            content = source.read()
        except (OSError, ValueError) as e:
            raise EncodingError(f"Could not read image: {e}") from e
        if not isinstance(content, (bytes, bytearray)):
            raise EncodingError("Image stream must be opened in binary mode.")
        return bytes(content), getattr(source, "name", None)

    raise EncodingError(f"Unsupported image source: {type(source).__name__}")


def encode_image(source: ImageSource, mime_type: Optional[str] = None) -> EncodedImage:
    """Read an image fully and return it base64-encoded without a data-URL prefix."""
    if isinstance(source, str) and source.startswith("data:"):
        header = source.split(",", 1)[0]
        data = strip_data_url(source)
        if not data:
            raise EncodingError("The image is empty.")
        declared = header[len("data:"):].split(";", 1)[0]
        return EncodedImage(data=data, mime_type=mime_type or declared or DEFAULT_MIME_TYPE)

    content, filename = _read_source(source)
    if not content:
        raise EncodingError("The image is empty.")

    resolved_mime = mime_type or detect_mime_type(content, filename)

    try:
        encoded = base64.b64encode(content).decode("ascii")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Could not encode image: {e}") from e

    data = strip_data_url(encoded)
    logger.debug("Encoded %d bytes of %s", len(content), resolved_mime)
    return EncodedImage(data=data, mime_type=resolved_mime)
