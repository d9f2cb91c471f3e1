"""Visualization of the rolling occupancy trend."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
from loguru import logger


if TYPE_CHECKING:
    from collections.abc import Sequence

    from occupancy_watch.pipeline.types import TrendPoint


class TrendPlotter:
    """Render the occupancy trend buffer as a line chart.

    Example:
        >>> plotter = TrendPlotter(session.trend, threshold=3)
        >>> plotter.plot()
        >>> plotter.save_figure("trend.png")
    """

    def __init__(
        self, points: Sequence[TrendPoint], threshold: int | None = None
    ) -> None:
        """Initialize the plotter with trend samples.

        Args:
            points: Trend samples, oldest first
            threshold: Alert threshold drawn as a reference line
        """
        if not points:
            message = "No trend points provided for plotting"
            raise ValueError(message)

        self.points = list(points)
        self.threshold = threshold
        self.fig = None
        self.ax = None
        logger.info("Initialized trend plotter with {} samples", len(self.points))

    def plot(self, ax: plt.Axes | None = None) -> plt.Axes:
        """Plot people count over time.

        Args:
            ax: Matplotlib axes to plot on. If None, creates new figure.

        Returns:
            The axes object used for plotting
        """
        if ax is None:
            _fig, ax = plt.subplots(figsize=(12, 4))
        self.fig = ax.figure
        self.ax = ax

        labels = [p.time for p in self.points]
        counts = [p.count for p in self.points]
        positions = list(range(len(self.points)))

        ax.plot(positions, counts, label="People", linewidth=2, color="#10b981")
        if self.threshold is not None:
            ax.axhline(
                self.threshold,
                linestyle="--",
                linewidth=1,
                color="#ef4444",
                label=f"Alert threshold ({self.threshold})",
            )

        step = max(1, len(labels) // 6)
        ax.set_xticks(positions[::step])
        ax.set_xticklabels(labels[::step], rotation=30, ha="right")
        ax.set_xlabel("Time", fontsize=11)
        ax.set_ylabel("People", fontsize=11)
        ax.set_title("Occupancy Trend", fontsize=13, fontweight="bold")
        ax.set_ylim(bottom=0)
        ax.legend(loc="upper right")
        ax.grid(visible=True, alpha=0.3)

        logger.debug("Trend plot created")
        return ax

    def save_figure(self, filepath: str | Path, dpi: int = 150) -> Path:
        """Save the current figure, plotting first when needed."""
        if self.fig is None:
            self.plot()

        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.fig.tight_layout()
        self.fig.savefig(path, dpi=dpi, bbox_inches="tight")
        logger.success("Trend chart saved to: {}", path)
        return path

    def close(self) -> None:
        """Close the figure to free memory."""
        if self.fig is not None:
            plt.close(self.fig)
            self.fig = None
            self.ax = None
