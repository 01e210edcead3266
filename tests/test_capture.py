"""Tests for the image source adapter."""

import base64
import threading
import time

import pytest

from chronosnap.errors import DeviceUnavailableError, UnsupportedImageError
from chronosnap.services.capture import CAMERA_ERROR_MESSAGE, ImageSourceAdapter
from tests.conftest import PNG_HEADER, FakeCamera, FakeCameraFactory


def test_live_capture_mirrors_and_encodes_png() -> None:
    factory = FakeCameraFactory()
    source = ImageSourceAdapter(open_camera=factory)

    payload = source.capture_from_live_feed()

    assert payload.mime_type == "image/png"
    assert payload.to_bytes() == PNG_HEADER + b"frame"
    assert factory.opened[0].mirror_flags == [True]
    assert source.is_active


def test_restart_releases_previous_stream() -> None:
    factory = FakeCameraFactory()
    source = ImageSourceAdapter(open_camera=factory)

    source.start()
    source.restart()
    source.restart()

    assert [camera.released for camera in factory.opened] == [True, True, False]

    source.close()

    assert all(camera.released for camera in factory.opened)
    assert not source.is_active


def test_concurrent_restarts_keep_one_stream() -> None:
    factory = FakeCameraFactory()
    opening = threading.Semaphore(1)
    overlaps: list[bool] = []

    def slow_open() -> FakeCamera:
        acquired = opening.acquire(blocking=False)
        overlaps.append(not acquired)
        try:
            time.sleep(0.01)
            return factory()
        finally:
            if acquired:
                opening.release()

    source = ImageSourceAdapter(open_camera=slow_open)
    workers = [threading.Thread(target=source.restart) for _ in range(4)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert overlaps == [False] * 4
    assert [camera.released for camera in factory.opened].count(False) == 1


def test_unavailable_camera_records_fallback_message() -> None:
    source = ImageSourceAdapter(open_camera=FakeCameraFactory(fail=True))

    with pytest.raises(DeviceUnavailableError):
        source.capture_from_live_feed()

    assert source.device_error == CAMERA_ERROR_MESSAGE
    assert not source.is_active


def test_failed_grab_releases_stream() -> None:
    factory = FakeCameraFactory()
    source = ImageSourceAdapter(open_camera=factory, mirror=False)
    source.start()
    factory.opened[0].fail_on_grab = True

    with pytest.raises(DeviceUnavailableError):
        source.capture_from_live_feed()

    assert factory.opened[0].released
    assert factory.opened[0].mirror_flags == [False]
    assert source.device_error == CAMERA_ERROR_MESSAGE


def test_successful_start_clears_previous_error() -> None:
    factory = FakeCameraFactory(fail=True)
    source = ImageSourceAdapter(open_camera=factory)
    with pytest.raises(DeviceUnavailableError):
        source.start()

    factory.fail = False
    source.restart()

    assert source.device_error is None


def test_capture_from_file_sniffs_type() -> None:
    source = ImageSourceAdapter(open_camera=FakeCameraFactory())

    payload = source.capture_from_file(b"\xff\xd8\xff\xe0jpegdata")

    assert payload.mime_type == "image/jpeg"
    assert payload.to_bytes() == b"\xff\xd8\xff\xe0jpegdata"


def test_capture_from_file_rejects_unknown_bytes() -> None:
    source = ImageSourceAdapter(open_camera=FakeCameraFactory())

    with pytest.raises(UnsupportedImageError):
        source.capture_from_file(b"not an image")


WEBP_BYTES = b"RIFF\x00\x00\x00\x00WEBPVP8 "


def _data_url(mime_type: str, raw: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(raw).decode('ascii')}"


def test_capture_from_data_url() -> None:
    source = ImageSourceAdapter(open_camera=FakeCameraFactory())

    payload = source.capture_from_data_url(_data_url("image/webp", WEBP_BYTES))

    assert payload.mime_type == "image/webp"
    assert payload.to_bytes() == WEBP_BYTES


def test_capture_from_data_url_rejects_non_image_content() -> None:
    source = ImageSourceAdapter(open_camera=FakeCameraFactory())

    with pytest.raises(UnsupportedImageError):
        source.capture_from_data_url("data:image/webp;base64,aGVsbG8=")


def test_capture_from_data_url_rejects_invalid_base64() -> None:
    source = ImageSourceAdapter(open_camera=FakeCameraFactory())

    with pytest.raises(UnsupportedImageError, match="not valid base64"):
        source.capture_from_data_url("data:image/png;base64,@@@@")


def test_capture_from_data_url_rejects_mismatched_type() -> None:
    source = ImageSourceAdapter(open_camera=FakeCameraFactory())
    url = _data_url("image/png", b"\xff\xd8\xff\xe0jpegdata")

    with pytest.raises(UnsupportedImageError, match="does not match"):
        source.capture_from_data_url(url)
