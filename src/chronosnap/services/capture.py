"""Image sources: live camera feed and uploaded files."""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from chronosnap.domain.images import ImagePayload, detect_mime_type
from chronosnap.errors import DeviceUnavailableError, UnsupportedImageError

logger = logging.getLogger(__name__)

CAMERA_ERROR_MESSAGE = "Could not access camera. Please check permissions."


class CameraDevice(Protocol):
    """An acquired camera stream."""

    def grab_png(self, *, mirror: bool) -> bytes:
        """Read one frame and return it encoded as PNG."""

    def release(self) -> None:
        """Stop the stream and free the device."""


@dataclass
class ImageSourceAdapter:
    """Produces image payloads from the camera or from uploaded bytes.

    The adapter holds at most one camera device at a time. `start` and
    `restart` always release the current device before acquiring a new one.
    When acquisition fails, `device_error` keeps a user-facing message so the
    upload fallback can be offered.

    Device calls block, so callers may run them on worker threads; a lock
    keeps acquisition and release serialized.
    """

    open_camera: Callable[[], CameraDevice]
    mirror: bool = True
    device_error: str | None = None
    _device: CameraDevice | None = field(default=None, init=False, repr=False)
    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False
    )

    @property
    def is_active(self) -> bool:
        return self._device is not None

    def start(self) -> None:
        """Acquire the camera, releasing any previously held stream first."""
        with self._lock:
            self.close()
            try:
                self._device = self.open_camera()
            except DeviceUnavailableError:
                self.device_error = CAMERA_ERROR_MESSAGE
                logger.warning("Camera unavailable; upload fallback required")
                raise
            self.device_error = None
            logger.info("Camera stream acquired")

    def restart(self) -> None:
        """Release and re-acquire the camera stream."""
        self.start()

    def close(self) -> None:
        """Release the camera stream if one is held."""
        with self._lock:
            device, self._device = self._device, None
            if device is not None:
                device.release()
                logger.info("Camera stream released")

    def capture_from_live_feed(self) -> ImagePayload:
        """Grab the current frame as a PNG payload."""
        with self._lock:
            if self._device is None:
                self.start()
            device = self._device
            if device is None:
                raise DeviceUnavailableError(CAMERA_ERROR_MESSAGE)
            try:
                png_bytes = device.grab_png(mirror=self.mirror)
            except DeviceUnavailableError:
                self.device_error = CAMERA_ERROR_MESSAGE
                self.close()
                raise
        return ImagePayload.from_bytes(png_bytes, "image/png")

    def capture_from_file(self, raw: bytes) -> ImagePayload:
        """Wrap uploaded image bytes after sniffing their type."""
        mime_type = detect_mime_type(raw)
        if mime_type is None:
            raise UnsupportedImageError("Upload a PNG, JPEG or WEBP image")
        return ImagePayload.from_bytes(raw, mime_type)

    def capture_from_data_url(self, url: str) -> ImagePayload:
        """Wrap an uploaded data URL whose bytes match its declared type."""
        return ImagePayload.from_data_url(url)


def camera_disabled() -> CameraDevice:
    """Camera opener used when the camera is switched off in settings."""
    raise DeviceUnavailableError("Camera disabled by configuration")
