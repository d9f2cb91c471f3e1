"""FPS measurement and rolling occupancy trend for the detection loop."""

from __future__ import annotations

from collections import deque

from occupancy_watch.pipeline.events import format_clock_time
from occupancy_watch.pipeline.types import PerformanceMetrics, TrendPoint


TREND_CAPACITY = 30
SAMPLE_INTERVAL_S = 1.0


class TelemetryTracker:
    """Track completed cycles per second and sample the occupancy trend.

    Sampling is driven by wall-clock time passed to :meth:`tick`, so FPS
    reflects the cycles that actually completed, not the configured mode.
    """

    def __init__(
        self,
        now: float,
        *,
        trend_capacity: int = TREND_CAPACITY,
        avg_frames: int = 30,
    ) -> None:
        """Initialize the tracker with the time of the first sample window."""
        self.avg_frames = avg_frames
        self.fps = 0
        self.frame_counter = 0
        self.last_sample_time = now
        self.trend: deque[TrendPoint] = deque(maxlen=trend_capacity)
        self.inference_times: list[float] = []

    def tick(self, count: int, now: float) -> bool:
        """Count a completed cycle; return True when a new sample was taken."""
        self.frame_counter += 1
        elapsed = now - self.last_sample_time
        if elapsed < SAMPLE_INTERVAL_S:
            return False

        self.fps = round(self.frame_counter / elapsed)
        self.frame_counter = 0
        self.last_sample_time = now
        self.trend.append(TrendPoint(time=format_clock_time(now), count=count))
        return True

    def add_inference_time(self, elapsed_ms: float) -> None:
        """Record a single inference duration in milliseconds."""
        self.inference_times.append(elapsed_ms)
        if len(self.inference_times) > self.avg_frames:
            self.inference_times.pop(0)

    def restart_window(self, now: float) -> None:
        """Begin a fresh FPS window, keeping the trend history."""
        self.fps = 0
        self.frame_counter = 0
        self.last_sample_time = now

    def clear_trend(self) -> None:
        """Drop all trend samples."""
        self.trend.clear()

    def trend_points(self) -> list[TrendPoint]:
        """Return trend samples oldest first."""
        return list(self.trend)

    def get_metrics(self) -> PerformanceMetrics:
        """Compute the current loop metrics."""
        metrics = PerformanceMetrics(fps=self.fps)
        if self.inference_times:
            metrics.inference_ms = sum(self.inference_times) / len(self.inference_times)
            metrics.inference_capacity_fps = (
                1000.0 / metrics.inference_ms if metrics.inference_ms > 0 else 0.0
            )
        return metrics
