# File: furniture_ocr/client/capture.py

"""
Camera capture controller.

Lifecycle of one capture dialog as an explicit state machine:

    IDLE -> PERMISSION_REQUESTED -> GRANTED | DENIED
    GRANTED -> PREVIEWING -> CAPTURING -> CAPTURE_SUCCEEDED | CAPTURE_FAILED
    DENIED -> PERMISSION_REQUESTED            (try again)
    CAPTURE_FAILED -> CAPTURING               (stream is still live)
    any state but CAPTURING -> CLOSED

The camera stream is acquired when permission is granted and released by
``stop()``; ``stop()`` runs on success, on close, and when the controller is
used as a context manager, on every exit from the ``with`` block.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

import imageio.v2 as imageio
import imageio.v3 as iio
import numpy as np

from furniture_ocr.client.notify import Notifier

logger = logging.getLogger(__name__)

REAR_CAMERA = "environment"
PREFERRED_WIDTH = 1920
PREFERRED_HEIGHT = 1080
JPEG_QUALITY = 80

DENIED_MESSAGE = "Camera access is required to capture images"
NOT_READY_MESSAGE = "Camera not ready"
CAPTURE_FAILED_MESSAGE = "Failed to capture photo"


class CaptureState(str, Enum):
    IDLE = "idle"
    PERMISSION_REQUESTED = "permission_requested"
    GRANTED = "granted"
    DENIED = "denied"
    PREVIEWING = "previewing"
    CAPTURING = "capturing"
    CAPTURE_SUCCEEDED = "capture_succeeded"
    CAPTURE_FAILED = "capture_failed"
    CLOSED = "closed"


class BusyPhase(str, Enum):
    SCANNING = "Scanning…"
    UPLOADING = "Uploading image…"
    PROCESSING = "Processing image…"


_TRANSITIONS = {
    CaptureState.IDLE: {CaptureState.PERMISSION_REQUESTED},
    CaptureState.PERMISSION_REQUESTED: {CaptureState.GRANTED, CaptureState.DENIED},
    CaptureState.GRANTED: {CaptureState.PREVIEWING, CaptureState.CAPTURING},
    CaptureState.DENIED: {CaptureState.PERMISSION_REQUESTED},
    CaptureState.PREVIEWING: {CaptureState.CAPTURING},
    CaptureState.CAPTURING: {CaptureState.CAPTURE_SUCCEEDED, CaptureState.CAPTURE_FAILED},
    CaptureState.CAPTURE_SUCCEEDED: set(),
    CaptureState.CAPTURE_FAILED: {CaptureState.CAPTURING},
    CaptureState.CLOSED: set(),
}


class CaptureStateError(RuntimeError):
    """An operation was attempted in a state that does not allow it."""


class CameraPermissionError(RuntimeError):
    """The platform refused (or could not provide) camera access."""


@dataclass(frozen=True)
class CapturedImage:
    name: str
    content_type: str
    data: bytes


# -----------------------------
# Devices
# -----------------------------
class MediaStream:
    """A live camera stream. The device stays engaged until ``stop()``."""

    @property
    def active(self) -> bool:
        raise NotImplementedError

    def read_frame(self) -> Optional[np.ndarray]:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError


class CameraDevice:
    def open(self, facing_mode: str, width: int, height: int) -> MediaStream:
        """Return a live stream or raise ``CameraPermissionError``."""
        raise NotImplementedError


class ImageioStream(MediaStream):
    def __init__(self, reader):
        self._reader = reader
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def read_frame(self) -> Optional[np.ndarray]:
        if not self._active:
            return None
        return np.asarray(self._reader.get_next_data())

    def stop(self) -> None:
        if self._active:
            self._active = False
            self._reader.close()


class ImageioCamera(CameraDevice):
    """
    Webcam access through imageio's ffmpeg plugin.

    ``devices`` maps a facing mode to an imageio URI such as ``<video0>``.
    """

    def __init__(self, devices: Optional[dict[str, str]] = None):
        self.devices = devices or {REAR_CAMERA: "<video0>"}

    def open(self, facing_mode: str, width: int, height: int) -> MediaStream:
        uri = self.devices.get(facing_mode) or next(iter(self.devices.values()))
        try:
            reader = imageio.get_reader(uri, size=f"{width}x{height}")
        except Exception as exc:
            raise CameraPermissionError(f"Cannot open camera {uri}: {exc}") from exc
        return ImageioStream(reader)


class PreviewSurface:
    """Where the live stream is shown; capture grabs the frame it displays."""

    def __init__(self):
        self.stream: Optional[MediaStream] = None

    @property
    def ready(self) -> bool:
        return self.stream is not None and self.stream.active

    def attach(self, stream: MediaStream) -> None:
        self.stream = stream

    def detach(self) -> None:
        self.stream = None

    def grab_frame(self) -> Optional[np.ndarray]:
        return self.stream.read_frame() if self.stream is not None else None


def encode_jpeg(frame: np.ndarray, quality: int = JPEG_QUALITY) -> bytes:
    frame = np.asarray(frame)
    if frame.dtype != np.uint8:
        frame = np.clip(frame, 0, 255).astype(np.uint8)
    if frame.ndim == 3 and frame.shape[2] == 4:
        frame = frame[..., :3]
    return iio.imwrite("<bytes>", frame, extension=".jpg", quality=quality)


def is_image_type(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.lower().startswith("image/")


# -----------------------------
# Controller
# -----------------------------
class CaptureController:
    def __init__(
        self,
        device: CameraDevice,
        notifier: Optional[Notifier] = None,
        preview: Optional[PreviewSurface] = None,
    ):
        self.device = device
        self.notifier = notifier or Notifier()
        self.preview = preview or PreviewSurface()
        self.state = CaptureState.IDLE
        self.phase: Optional[BusyPhase] = None
        self.error: Optional[str] = None
        self._permission = "unknown"
        self._stream: Optional[MediaStream] = None

    def __enter__(self) -> "CaptureController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # -- state --------------------------------------------------------
    def _transition(self, target: CaptureState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise CaptureStateError(f"Cannot go from {self.state.value} to {target.value}")
        logger.debug("Capture %s -> %s", self.state.value, target.value)
        self.state = target

    @property
    def permission(self) -> str:
        """unknown, granted or denied"""
        return self._permission

    @property
    def busy_label(self) -> Optional[str]:
        return self.phase.value if self.phase else None

    @property
    def can_close(self) -> bool:
        return self.phase is None

    @property
    def stream_active(self) -> bool:
        return self._stream is not None and self._stream.active

    @contextmanager
    def busy(self, phase: BusyPhase) -> Iterator[None]:
        """Mark an in-flight operation; the dialog cannot be closed meanwhile."""
        previous = self.phase
        self.phase = phase
        try:
            yield
        finally:
            self.phase = previous

    # -- camera -------------------------------------------------------
    def request_permission(self) -> Optional[MediaStream]:
        if self.state not in (CaptureState.IDLE, CaptureState.DENIED):
            raise CaptureStateError(f"Permission already handled ({self.state.value})")

        self._transition(CaptureState.PERMISSION_REQUESTED)
        try:
            stream = self.device.open(REAR_CAMERA, PREFERRED_WIDTH, PREFERRED_HEIGHT)
        except CameraPermissionError as exc:
            logger.error("Camera permission denied: %s", exc)
            self.error = DENIED_MESSAGE
            self._permission = "denied"
            self._transition(CaptureState.DENIED)
            self.notifier.error(DENIED_MESSAGE)
            return None

        self.error = None
        self._permission = "granted"
        self._stream = stream
        self._transition(CaptureState.GRANTED)
        self.preview.attach(stream)
        self._transition(CaptureState.PREVIEWING)
        return stream

    def capture(self) -> Optional[CapturedImage]:
        if self.state not in (CaptureState.GRANTED, CaptureState.PREVIEWING, CaptureState.CAPTURE_FAILED):
            raise CaptureStateError(f"Cannot capture while {self.state.value}")

        if not self.stream_active or not self.preview.ready:
            self.notifier.error(NOT_READY_MESSAGE)
            return None

        self._transition(CaptureState.CAPTURING)
        with self.busy(BusyPhase.SCANNING):
            try:
                frame = self.preview.grab_frame()
                if frame is None:
                    raise ValueError("no frame available")
                data = encode_jpeg(frame)
            except Exception as exc:
                logger.error("Error capturing photo: %s", exc)
                self._transition(CaptureState.CAPTURE_FAILED)
                self.notifier.error(CAPTURE_FAILED_MESSAGE)
                return None

        image = CapturedImage(
            name=f"capture-{int(time.time() * 1000)}.jpg",
            content_type="image/jpeg",
            data=data,
        )
        self._transition(CaptureState.CAPTURE_SUCCEEDED)
        self.stop()
        return image

    def select_file(self, name: str, data: bytes, content_type: Optional[str]) -> Optional[CapturedImage]:
        """Use an existing image instead of the camera."""
        if self.state is CaptureState.CLOSED:
            raise CaptureStateError("Capture dialog is closed")
        if not is_image_type(content_type):
            logger.info("Ignoring non-image file %s (%s)", name, content_type)
            return None

        self.stop()
        return CapturedImage(name=name, content_type=content_type, data=data)

    def stop(self) -> None:
        """Release the camera. Safe to call any number of times."""
        if self._stream is not None:
            self._stream.stop()
            logger.debug("Camera stream released")
        self._stream = None
        self.preview.detach()

    def close(self) -> bool:
        """
        Close the dialog and release the camera.

        Refused (returns False) while an operation is in flight.
        """
        if not self.can_close:
            return False
        if self.state is CaptureState.CLOSED:
            return True
        self.stop()
        self.state = CaptureState.CLOSED
        return True
