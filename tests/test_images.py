"""Tests for image payloads and data URL helpers."""

import base64

import pytest

from chronosnap.domain.images import (
    ImagePayload,
    detect_mime_type,
    mime_type_of,
    strip_data_url_prefix,
    wrap_data_url,
)
from chronosnap.errors import UnsupportedImageError


@pytest.mark.parametrize("image_type", ["png", "jpeg", "jpg", "webp"])
def test_strip_and_wrap_round_trip(image_type: str) -> None:
    url = f"data:image/{image_type};base64,aGVsbG8="

    assert wrap_data_url(strip_data_url_prefix(url), mime_type_of(url)) == url


def test_strip_leaves_unprefixed_text_unchanged() -> None:
    assert strip_data_url_prefix("aGVsbG8=") == "aGVsbG8="


def test_mime_type_defaults_to_png() -> None:
    assert mime_type_of("aGVsbG8=") == "image/png"


def test_payload_from_data_url_and_back() -> None:
    raw = b"\xff\xd8\xff\xe0jpegdata"
    encoded = base64.b64encode(raw).decode("ascii")
    url = f"data:image/jpeg;base64,{encoded}"

    payload = ImagePayload.from_data_url(url)

    assert payload.mime_type == "image/jpeg"
    assert payload.data == encoded
    assert payload.data_url == url
    assert payload.to_bytes() == raw


def test_payload_from_data_url_accepts_jpg_alias() -> None:
    encoded = base64.b64encode(b"\xff\xd8\xff\xe0jpegdata").decode("ascii")

    payload = ImagePayload.from_data_url(f"data:image/jpg;base64,{encoded}")

    assert payload.mime_type == "image/jpg"


def test_payload_rejects_unknown_mime_type() -> None:
    with pytest.raises(UnsupportedImageError):
        ImagePayload(data="aGVsbG8=", mime_type="image/gif")


def test_payload_rejects_non_image_data_url() -> None:
    with pytest.raises(UnsupportedImageError):
        ImagePayload.from_data_url("data:text/plain;base64,aGVsbG8=")


def test_payload_from_bytes_encodes_base64() -> None:
    payload = ImagePayload.from_bytes(b"raw", "image/webp")

    assert base64.b64decode(payload.data) == b"raw"


def test_detect_mime_type_signatures() -> None:
    assert detect_mime_type(b"\x89PNG\r\n\x1a\nrest") == "image/png"
    assert detect_mime_type(b"\xff\xd8\xff\xe0rest") == "image/jpeg"
    assert detect_mime_type(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"
    assert detect_mime_type(b"GIF89a") is None
