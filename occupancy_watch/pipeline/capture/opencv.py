"""OpenCV frame sources for live cameras and video files."""

from __future__ import annotations

from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING

import cv2
from loguru import logger


if TYPE_CHECKING:
    import numpy as np

    from occupancy_watch.pipeline.types import CameraConfig


class FrameReadError(RuntimeError):
    """Raised when a single frame could not be read but the source is alive."""


class _VideoCaptureSource:
    """Shared ``cv2.VideoCapture`` handle management."""

    label = "source"

    def __init__(self) -> None:
        self.cap: cv2.VideoCapture | None = None
        self.frame_size = (0, 0)
        self.reported_fps = 0.0

    def _attach(self, cap: cv2.VideoCapture) -> bool:
        if not cap.isOpened():
            cap.release()
            return False
        self.cap = cap
        self.frame_size = (
            int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )
        self.reported_fps = float(cap.get(cv2.CAP_PROP_FPS))
        logger.success(
            "{} ready: {}x{} @ {:.1f} FPS",
            self.label,
            *self.frame_size,
            self.reported_fps,
        )
        return True

    def close(self) -> None:
        """Release the capture handle."""
        if self.cap is None:
            return
        self.cap.release()
        self.cap = None
        logger.debug("{} released", self.label)

    def is_opened(self) -> bool:
        return self.cap is not None and self.cap.isOpened()


class OpenCVCapture(_VideoCaptureSource):
    """Webcam source; tolerates isolated failed grabs."""

    def __init__(self, config: CameraConfig, max_failed_reads: int = 30) -> None:
        """Create an unopened webcam source."""
        super().__init__()
        self.config = config
        self.max_failed_reads = max_failed_reads
        self.label = f"Camera {config.device_index}"
        self._failed_reads = 0

    def open(self) -> bool:
        """Open the device and request the configured resolution."""
        cap = cv2.VideoCapture(self.config.device_index)
        requested = {
            cv2.CAP_PROP_FRAME_WIDTH: self.config.width,
            cv2.CAP_PROP_FRAME_HEIGHT: self.config.height,
            cv2.CAP_PROP_FPS: self.config.fps,
        }
        for prop, value in requested.items():
            cap.set(prop, value)
        # Not every backend exposes a buffer size.
        with suppress(Exception):
            cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        self._failed_reads = 0
        if not self._attach(cap):
            logger.error("Cannot open camera {}", self.config.device_index)
            return False
        return True

    def read_frame(self) -> np.ndarray | None:
        """Read the next frame; None once the camera is gone."""
        if not self.is_opened():
            return None
        ok, frame = self.cap.read()
        if ok and frame is not None:
            self._failed_reads = 0
            return frame

        self._failed_reads += 1
        if self._failed_reads >= self.max_failed_reads:
            logger.warning(
                "Camera returned no frame {} times in a row", self._failed_reads
            )
            return None
        message = "Failed to grab frame"
        raise FrameReadError(message)


class VideoFileCapture(_VideoCaptureSource):
    """Video file source; a failed read means the file is exhausted."""

    def __init__(self, path: str | Path) -> None:
        """Create an unopened reader for ``path``."""
        super().__init__()
        self.path = Path(path)
        self.label = self.path.name

    def open(self) -> bool:
        """Open the file for decoding."""
        if not self.path.is_file():
            logger.error("Video file not found: {}", self.path)
            return False
        if not self._attach(cv2.VideoCapture(str(self.path))):
            logger.error("Cannot decode video file: {}", self.path)
            return False
        return True

    def read_frame(self) -> np.ndarray | None:
        """Read the next frame; None at end of stream."""
        if self.cap is None:
            return None
        ok, frame = self.cap.read()
        return frame if ok else None
