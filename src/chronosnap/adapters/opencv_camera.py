"""OpenCV-backed camera device."""

from dataclasses import dataclass

import cv2

from chronosnap.errors import DeviceUnavailableError
from chronosnap.services.capture import CameraDevice


@dataclass
class OpenCvCamera(CameraDevice):
    """Camera stream read through `cv2.VideoCapture`."""

    capture: cv2.VideoCapture

    @classmethod
    def open(
        cls, index: int = 0, width: int = 1280, height: int = 720
    ) -> "OpenCvCamera":
        """Open a capture device at the requested resolution."""
        capture = cv2.VideoCapture(index)
        if not capture.isOpened():
            capture.release()
            raise DeviceUnavailableError(f"Camera {index} could not be opened")
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        return cls(capture=capture)

    def grab_png(self, *, mirror: bool) -> bytes:
        """Read one frame, optionally mirror it, and encode it as PNG."""
        ok, frame = self.capture.read()
        if not ok or frame is None:
            raise DeviceUnavailableError("Camera returned no frame")
        if mirror:
            frame = cv2.flip(frame, 1)
        encoded, buffer = cv2.imencode(".png", frame)
        if not encoded:
            raise DeviceUnavailableError("Frame could not be encoded as PNG")
        return buffer.tobytes()

    def release(self) -> None:
        """Release the capture device."""
        self.capture.release()
