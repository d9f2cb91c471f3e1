from __future__ import annotations

from occupancy_watch.pipeline.metrics.stats import StatsAggregator
from occupancy_watch.pipeline.metrics.telemetry import TelemetryTracker


__all__ = ["StatsAggregator", "TelemetryTracker"]
