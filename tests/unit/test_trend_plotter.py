"""Unit tests for the occupancy trend chart."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import matplotlib

matplotlib.use("Agg")

import pytest

from occupancy_watch.monitoring.plotting import TrendPlotter
from occupancy_watch.pipeline.types import TrendPoint


def create_sample_points(n: int = 10) -> list[TrendPoint]:
    """Helper to create consecutive one-second samples."""
    return [TrendPoint(time=f"12:00:{i:02d}", count=i % 4) for i in range(n)]


class TestTrendPlotter:
    """Tests for TrendPlotter."""

    def test_initialization_empty_points(self) -> None:
        """Empty trend data is rejected."""
        with pytest.raises(ValueError, match="No trend points"):
            TrendPlotter([])

    def test_initialization(self) -> None:
        """Points are copied and no figure exists yet."""
        points = create_sample_points(5)
        plotter = TrendPlotter(points, threshold=3)

        assert plotter.points == points
        assert plotter.threshold == 3
        assert plotter.fig is None

    @patch("matplotlib.pyplot.subplots")
    def test_plot_creates_figure(self, mock_subplots: MagicMock) -> None:
        """Plotting without axes creates a figure and draws the threshold."""
        mock_ax = MagicMock()
        mock_subplots.return_value = (MagicMock(), mock_ax)
        plotter = TrendPlotter(create_sample_points(), threshold=2)

        ax = plotter.plot()

        assert ax is mock_ax
        mock_ax.plot.assert_called_once()
        mock_ax.axhline.assert_called_once()
        assert plotter.fig is mock_ax.figure

    @patch("matplotlib.pyplot.subplots")
    def test_plot_without_threshold(self, mock_subplots: MagicMock) -> None:
        """No reference line is drawn without a threshold."""
        mock_ax = MagicMock()
        mock_subplots.return_value = (MagicMock(), mock_ax)

        TrendPlotter(create_sample_points()).plot()

        mock_ax.axhline.assert_not_called()

    def test_save_figure(self, tmp_path: Path) -> None:
        """Saving renders the chart to an image file."""
        plotter = TrendPlotter(create_sample_points(30), threshold=3)
        try:
            path = plotter.save_figure(tmp_path / "charts" / "trend.png")
        finally:
            plotter.close()

        assert path.is_file()
        assert plotter.fig is None
