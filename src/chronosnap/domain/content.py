"""Content parts returned by generative model calls."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class Modality(Enum):
    """Capability targeted by a model call."""

    TEXT = "text"
    IMAGE = "image"


@dataclass(frozen=True)
class TextPart:
    """Generated text."""

    text: str


@dataclass(frozen=True)
class InlineImagePart:
    """Inline base64 image data."""

    data: str
    mime_type: str = "image/png"


ContentPart = TextPart | InlineImagePart


def first_image(parts: Iterable[ContentPart]) -> InlineImagePart | None:
    """Return the first image part carrying data, if any."""
    for part in parts:
        if isinstance(part, InlineImagePart) and part.data:
            return part
    return None


def joined_text(parts: Iterable[ContentPart]) -> str:
    """Concatenate the text of all text parts."""
    return "".join(part.text for part in parts if isinstance(part, TextPart))
