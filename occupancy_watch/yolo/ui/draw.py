"""OpenCV rendering of occupancy annotations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import cv2
import numpy as np


if TYPE_CHECKING:
    from collections.abc import Sequence

    from occupancy_watch.pipeline.types import Detection, PerformanceMetrics, Stats


BOX_COLOR = (129, 185, 16)
ALERT_COLOR = (68, 68, 239)
TEXT_COLOR = (0, 0, 0)
LABEL_HEIGHT = 22


def format_label(detection: Detection) -> str:
    """Return the ``"<CLASS> <score%>"`` caption for a detection."""
    return f"{detection.label.upper()} {round(detection.score * 100)}%"


def draw_detections(
    frame: np.ndarray,
    detections: Sequence[Detection],
    *,
    color: tuple[int, int, int] = BOX_COLOR,
) -> np.ndarray:
    """Draw boxes and captions on a copy of ``frame`` and return it."""
    canvas = frame.copy()
    h, w = canvas.shape[:2]

    for det in detections:
        x, y, bw, bh = det.bbox
        x1 = int(np.clip(x, 0, w - 1))
        y1 = int(np.clip(y, 0, h - 1))
        x2 = int(np.clip(x + bw, 0, w - 1))
        y2 = int(np.clip(y + bh, 0, h - 1))
        if x2 <= x1 or y2 <= y1:
            continue

        cv2.rectangle(canvas, (x1, y1), (x2, y2), color, 2)

        label = format_label(det)
        (tw, _th), _ = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1)
        top = max(0, y1 - LABEL_HEIGHT)
        cv2.rectangle(canvas, (x1, top), (x1 + tw + 10, top + LABEL_HEIGHT), color, -1)
        cv2.putText(
            canvas,
            label,
            (x1 + 5, top + LABEL_HEIGHT - 6),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,
            TEXT_COLOR,
            1,
            cv2.LINE_AA,
        )

    return canvas


def draw_status_panel(
    frame: np.ndarray,
    stats: Stats,
    metrics: PerformanceMetrics,
    *,
    threshold: int,
    duration: str,
    recording: bool = False,
) -> None:
    """Draw the live counters panel in place."""
    over = stats.current_count >= threshold
    status = "Crowd Alert" if over else "Normal Activity"
    lines = [
        (f"People: {stats.current_count}", ALERT_COLOR if over else BOX_COLOR),
        (f"Peak: {stats.peak_count}", (220, 220, 220)),
        (f"Frames with people: {stats.total_detections}", (220, 220, 220)),
        (f"FPS: {metrics.fps}", (0, 255, 255)),
        (f"Session: {duration}", (220, 220, 220)),
        (status, ALERT_COLOR if over else BOX_COLOR),
    ]
    if recording:
        lines.append(("REC", (0, 0, 255)))

    line_height = 22
    panel_h = 10 + line_height * len(lines)
    cv2.rectangle(frame, (5, 5), (260, panel_h), (0, 0, 0), -1)
    cv2.rectangle(frame, (5, 5), (260, panel_h), (100, 100, 100), 1)

    y_offset = 25
    for text, color in lines:
        cv2.putText(
            frame,
            text,
            (12, y_offset),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.55,
            color,
            1,
            cv2.LINE_AA,
        )
        y_offset += line_height
