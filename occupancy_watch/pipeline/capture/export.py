"""Export sink writing screenshots and recordings to disk with OpenCV."""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import cv2
from loguru import logger


if TYPE_CHECKING:
    import numpy as np


class VideoArtifact(Protocol):
    """Open recording accepting composited frames."""

    def write(self, frame: np.ndarray) -> None:
        """Append one frame."""
        ...

    def finalize(self) -> Path:
        """Close the recording and return where it was stored."""
        ...


class ExportSink(Protocol):
    """Receiver of finalized capture artifacts."""

    def save_image(self, image: np.ndarray, capture_id: str) -> Path:
        """Persist a screenshot and return its location."""
        ...

    def open_video(self, width: int, height: int, fps: float) -> VideoArtifact:
        """Start a new recording of ``width`` x ``height`` frames."""
        ...


class OpenCVVideoArtifact:
    """``cv2.VideoWriter`` backed recording."""

    def __init__(self, path: Path, width: int, height: int, fps: float) -> None:
        """Open the underlying writer."""
        self.path = path
        self.size = (width, height)
        fourcc = cv2.VideoWriter_fourcc(*"mp4v")
        self._writer = cv2.VideoWriter(str(path), fourcc, fps, self.size)
        if not self._writer.isOpened():
            message = f"Cannot open video writer for {path}"
            raise OSError(message)
        self.frames_written = 0

    def write(self, frame: np.ndarray) -> None:
        """Append one frame, resizing when the source resolution changed."""
        if (frame.shape[1], frame.shape[0]) != self.size:
            frame = cv2.resize(frame, self.size)
        self._writer.write(frame)
        self.frames_written += 1

    def finalize(self) -> Path:
        """Release the writer."""
        self._writer.release()
        logger.info("Recording closed: {} ({} frames)", self.path, self.frames_written)
        return self.path


class OpenCVExportSink:
    """Write PNG screenshots and MP4 recordings into ``output_dir``."""

    def __init__(
        self, output_dir: str | Path = "captures", prefix: str = "occupancy"
    ) -> None:
        """Create the sink; the directory is created on first use."""
        self.output_dir = Path(output_dir)
        self.prefix = prefix

    def _ensure_dir(self) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir

    def save_image(self, image: np.ndarray, capture_id: str) -> Path:
        """Write ``capture_<id>.png``."""
        path = self._ensure_dir() / f"capture_{capture_id}.png"
        if not cv2.imwrite(str(path), image):
            message = f"Failed to write screenshot {path}"
            raise OSError(message)
        logger.debug("Screenshot written: {}", path)
        return path

    def open_video(self, width: int, height: int, fps: float) -> OpenCVVideoArtifact:
        """Start ``<prefix>_<epoch ms>.mp4``."""
        path = self._ensure_dir() / f"{self.prefix}_{int(time.time() * 1000)}.mp4"
        return OpenCVVideoArtifact(path, width, height, fps)
