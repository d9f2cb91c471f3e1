"""Shared data structures for the occupancy monitoring pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path

    import numpy as np


class SourceKind(Enum):
    """Kind of frame source a session can be started from."""

    LIVE = "live"
    FILE = "file"


class ProcessingMode(Enum):
    """Processing speed modes and their inter-cycle delay."""

    FAST = "fast"
    NORMAL = "normal"
    ACCURATE = "accurate"

    @property
    def delay_s(self) -> float:
        """Return the pause between two detection cycles in seconds."""
        return _MODE_DELAYS_S[self]


_MODE_DELAYS_S = {
    ProcessingMode.FAST: 0.030,
    ProcessingMode.NORMAL: 0.100,
    ProcessingMode.ACCURATE: 0.250,
}


class Severity(Enum):
    """Severity tag of an event log entry."""

    INFO = "info"
    ALERT = "alert"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class SessionState(Enum):
    """Lifecycle states of a monitoring session."""

    IDLE = "idle"
    MONITORING = "monitoring"
    MONITORING_AND_RECORDING = "monitoring_and_recording"

    @property
    def is_active(self) -> bool:
        """Return True while detection cycles are running."""
        return self is not SessionState.IDLE


@dataclass
class CameraConfig:
    """Requested webcam device and capture settings."""

    device_index: int = 0
    width: int = 1280
    height: int = 720
    fps: int = 30


@dataclass(frozen=True)
class Detection:
    """Single detected object in frame pixel space (x, y, width, height)."""

    bbox: tuple[float, float, float, float]
    label: str
    score: float


@dataclass(frozen=True)
class FilteredDetections:
    """Detections left after class and confidence filtering."""

    detections: tuple[Detection, ...] = ()

    @property
    def count(self) -> int:
        """Return the number of retained detections."""
        return len(self.detections)


@dataclass
class Stats:
    """Running occupancy counters for a session."""

    current_count: int = 0
    peak_count: int = 0
    total_detections: int = 0
    avg_count: float = 0.0
    frames_processed: int = 0
    session_start_time: float | None = None


@dataclass(frozen=True)
class TrendPoint:
    """One sample of the rolling occupancy trend."""

    time: str
    count: int


@dataclass(frozen=True)
class LogEntry:
    """Immutable record of a notable session event."""

    id: str
    time: str
    message: str
    severity: Severity


@dataclass(frozen=True)
class FrameSnapshot:
    """Frame and detections of the most recently applied detection cycle."""

    frame: np.ndarray
    detections: tuple[Detection, ...]
    count: int
    timestamp: float


@dataclass
class Screenshot:
    """Manually captured composite of frame and annotations."""

    id: str
    image: np.ndarray
    timestamp: str
    count: int
    path: Path | None = None


@dataclass
class PerformanceMetrics:
    """Container for detection-loop performance metrics."""

    fps: int = 0
    inference_ms: float = 0.0
    inference_capacity_fps: float = 0.0
