"""Running occupancy counters derived from successive filtered counts."""

from __future__ import annotations

from dataclasses import replace

from occupancy_watch.pipeline.types import Stats


class StatsAggregator:
    """Maintain current, peak and cumulative occupancy counters."""

    def __init__(self) -> None:
        """Start with zeroed counters."""
        self._stats = Stats()
        self._count_sum = 0

    def update(self, count: int) -> Stats:
        """Apply one completed detection cycle and return a copy of the stats."""
        if count < 0:
            message = f"count must be non-negative, got {count}"
            raise ValueError(message)

        stats = self._stats
        stats.current_count = count
        stats.peak_count = max(stats.peak_count, count)
        if count > 0:
            stats.total_detections += 1

        stats.frames_processed += 1
        self._count_sum += count
        stats.avg_count = self._count_sum / stats.frames_processed
        return self.snapshot()

    def mark_session_start(self, timestamp: float) -> None:
        """Record when the current monitoring session started."""
        self._stats.session_start_time = timestamp

    def reset(self) -> None:
        """Zero all counters and forget the session start time."""
        self._stats = Stats()
        self._count_sum = 0

    def snapshot(self) -> Stats:
        """Return a detached copy of the current counters."""
        return replace(self._stats)
