"""Data URI handling for attachments and generated images.

Images travel through the app as ``data:<mime>;base64,<payload>`` strings,
which is also how they are persisted with the conversation.
"""

import base64
import binascii
import mimetypes
from pathlib import Path

from .chat.models import now_ms
from .config import EXPORT_FILENAME_TEMPLATE

DEFAULT_IMAGE_MIME = "image/png"


class InvalidDataURI(ValueError):
    """Raised when a string is not a base64 data URI."""


def to_data_uri(data: bytes, mime_type: str = DEFAULT_IMAGE_MIME) -> str:
    """Encode raw bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def parse_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a base64 data URI into its MIME type and decoded bytes.

    Args:
        uri: A ``data:<mime>;base64,<payload>`` string

    Returns:
        Tuple of (mime_type, raw bytes)

    Raises:
        InvalidDataURI: If the string is not a base64 data URI
    """
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise InvalidDataURI("expected a data:<mime>;base64,<payload> URI")

    mime_type = header[len("data:"):-len(";base64")] or DEFAULT_IMAGE_MIME
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidDataURI("data URI payload is not valid base64") from exc
    return mime_type, raw


def load_attachment(path: str | Path) -> str:
    """Read an image file from disk as a data URI.

    The MIME type is guessed from the file extension, falling back to PNG.
    """
    file_path = Path(path)
    mime_type, _ = mimetypes.guess_type(file_path.name)
    if not mime_type or not mime_type.startswith("image/"):
        mime_type = DEFAULT_IMAGE_MIME
    return to_data_uri(file_path.read_bytes(), mime_type)


def export_filename(timestamp: int | None = None) -> str:
    """Name for a locally saved generated image."""
    return EXPORT_FILENAME_TEMPLATE.format(timestamp=timestamp if timestamp is not None else now_ms())


def export_image(uri: str, directory: str | Path = ".", timestamp: int | None = None) -> Path:
    """Write a generated image data URI to ``MK_AI_Generated_<timestamp>.png``.

    Args:
        uri: Image data URI
        directory: Target directory, created if missing
        timestamp: Epoch milliseconds for the file name (default: now)

    Returns:
        Path of the written file
    """
    _, raw = parse_data_uri(uri)
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / export_filename(timestamp)
    target.write_bytes(raw)
    return target
