"""Frame sources and export sinks."""

from __future__ import annotations

from occupancy_watch.pipeline.capture.core import FrameSource, create_frame_source
from occupancy_watch.pipeline.capture.export import (
    ExportSink,
    OpenCVExportSink,
    OpenCVVideoArtifact,
    VideoArtifact,
)
from occupancy_watch.pipeline.capture.opencv import (
    FrameReadError,
    OpenCVCapture,
    VideoFileCapture,
)


__all__ = [
    "ExportSink",
    "FrameReadError",
    "FrameSource",
    "OpenCVCapture",
    "OpenCVExportSink",
    "OpenCVVideoArtifact",
    "VideoArtifact",
    "VideoFileCapture",
    "create_frame_source",
]
