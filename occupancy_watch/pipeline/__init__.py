from __future__ import annotations

from occupancy_watch.pipeline.alerts import (
    PYAUDIO_AVAILABLE,
    AlertEmitter,
    TwoToneAlertChannel,
)
from occupancy_watch.pipeline.capture import (
    OpenCVCapture,
    OpenCVExportSink,
    VideoFileCapture,
    create_frame_source,
)
from occupancy_watch.pipeline.config import MonitorConfig
from occupancy_watch.pipeline.events import EventLog
from occupancy_watch.pipeline.filtering import filter_detections
from occupancy_watch.pipeline.logging import configure_logging
from occupancy_watch.pipeline.metrics import StatsAggregator, TelemetryTracker
from occupancy_watch.pipeline.recording import CaptureManager
from occupancy_watch.pipeline.session import MonitorSession
from occupancy_watch.pipeline.types import (
    CameraConfig,
    Detection,
    FrameSnapshot,
    LogEntry,
    PerformanceMetrics,
    ProcessingMode,
    Screenshot,
    SessionState,
    Severity,
    SourceKind,
    Stats,
    TrendPoint,
)


__all__ = [
    "PYAUDIO_AVAILABLE",
    "AlertEmitter",
    "CameraConfig",
    "CaptureManager",
    "Detection",
    "EventLog",
    "FrameSnapshot",
    "LogEntry",
    "MonitorConfig",
    "MonitorSession",
    "OpenCVCapture",
    "OpenCVExportSink",
    "PerformanceMetrics",
    "ProcessingMode",
    "Screenshot",
    "SessionState",
    "Severity",
    "SourceKind",
    "Stats",
    "StatsAggregator",
    "TelemetryTracker",
    "TrendPoint",
    "TwoToneAlertChannel",
    "VideoFileCapture",
    "configure_logging",
    "create_frame_source",
    "filter_detections",
]
