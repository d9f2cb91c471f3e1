"""Plotting utilities for occupancy history."""

from __future__ import annotations

from occupancy_watch.monitoring.plotting import TrendPlotter


__all__ = ["TrendPlotter"]
