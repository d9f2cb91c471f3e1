"""Frame source selection for monitoring sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from loguru import logger

from occupancy_watch.pipeline.capture.opencv import OpenCVCapture, VideoFileCapture
from occupancy_watch.pipeline.types import CameraConfig, SourceKind


if TYPE_CHECKING:
    from pathlib import Path

    import numpy as np


class FrameSource(Protocol):
    """Protocol for frame sources consumed by the detection loop."""

    def open(self) -> bool:
        """Acquire the underlying device or file."""
        ...

    def read_frame(self) -> np.ndarray | None:
        """Return the next frame, or None at end of stream."""
        ...

    def close(self) -> None:
        """Release source resources."""
        ...


def create_frame_source(
    kind: SourceKind | str,
    *,
    camera: CameraConfig | None = None,
    path: str | Path | None = None,
) -> FrameSource:
    """Build an unopened frame source of the requested kind."""
    kind = SourceKind(kind)
    if kind is SourceKind.LIVE:
        logger.debug("Creating live frame source")
        return OpenCVCapture(camera or CameraConfig())

    if path is None:
        message = "A file source requires a path"
        raise ValueError(message)
    logger.debug("Creating file frame source for {}", path)
    return VideoFileCapture(path)
