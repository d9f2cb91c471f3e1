"""Per-frame reduction of raw model output to the monitored class."""

from __future__ import annotations

from typing import TYPE_CHECKING

from occupancy_watch.pipeline.types import FilteredDetections


if TYPE_CHECKING:
    from collections.abc import Iterable

    from occupancy_watch.pipeline.types import Detection


def filter_detections(
    detections: Iterable[Detection],
    target_label: str,
    confidence: float,
) -> FilteredDetections:
    """Keep detections of ``target_label`` scoring at least ``confidence``."""
    kept = tuple(
        det
        for det in detections
        if det.label == target_label and det.score >= confidence
    )
    return FilteredDetections(detections=kept)
