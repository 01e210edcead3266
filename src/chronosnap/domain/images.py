"""Image payloads and data URL helpers."""

import base64
import binascii
import re
from dataclasses import dataclass

from chronosnap.errors import UnsupportedImageError

SUPPORTED_MIME_TYPES = frozenset(
    {"image/png", "image/jpeg", "image/jpg", "image/webp"}
)
DEFAULT_MIME_TYPE = "image/png"

_PREFIX_PATTERN = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,")
_MIME_PATTERN = re.compile(r"^data:(image/[a-zA-Z]+);base64,")


@dataclass(frozen=True)
class ImagePayload:
    """Encoded image bytes plus their declared MIME type."""

    data: str
    mime_type: str

    def __post_init__(self) -> None:
        if self.mime_type not in SUPPORTED_MIME_TYPES:
            raise UnsupportedImageError(f"Unsupported image type: {self.mime_type}")

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str) -> "ImagePayload":
        """Base64-encode raw image bytes."""
        return cls(data=base64.b64encode(raw).decode("utf-8"), mime_type=mime_type)

    @classmethod
    def from_data_url(cls, url: str) -> "ImagePayload":
        """Parse a `data:image/<type>;base64,` URL."""
        cleaned = url.strip()
        if not _PREFIX_PATTERN.match(cleaned):
            raise UnsupportedImageError("Expected a base64 image data URL")
        payload = cls(
            data=strip_data_url_prefix(cleaned), mime_type=mime_type_of(cleaned)
        )
        sniffed = detect_mime_type(payload.to_bytes())
        if sniffed is None or sniffed != _canonical(payload.mime_type):
            raise UnsupportedImageError(
                f"Image data does not match declared type {payload.mime_type}"
            )
        return payload

    @property
    def data_url(self) -> str:
        """Render the payload as a data URL."""
        return wrap_data_url(self.data, self.mime_type)

    def to_bytes(self) -> bytes:
        """Decode the base64 data back to raw bytes."""
        try:
            return base64.b64decode(self.data, validate=True)
        except binascii.Error as exc:
            raise UnsupportedImageError("Image data is not valid base64") from exc


def strip_data_url_prefix(url: str) -> str:
    """Remove the data URL prefix, leaving the raw base64 payload."""
    return _PREFIX_PATTERN.sub("", url, count=1)


def mime_type_of(url: str) -> str:
    """Return the MIME type declared by a data URL."""
    match = _MIME_PATTERN.match(url)
    return match.group(1) if match else DEFAULT_MIME_TYPE


def wrap_data_url(data: str, mime_type: str) -> str:
    """Prefix raw base64 data with its data URL header."""
    return f"data:{mime_type};base64,{data}"


def detect_mime_type(raw: bytes) -> str | None:
    """Infer a basic image MIME type from file signatures."""
    if raw.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if raw.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if raw[:4] == b"RIFF" and raw[8:12] == b"WEBP":
        return "image/webp"
    return None


def _canonical(mime_type: str) -> str:
    return "image/jpeg" if mime_type == "image/jpg" else mime_type
