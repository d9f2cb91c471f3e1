from __future__ import annotations

from occupancy_watch.yolo.ui.draw import (
    draw_detections,
    draw_status_panel,
    format_label,
)


__all__ = ["draw_detections", "draw_status_panel", "format_label"]
