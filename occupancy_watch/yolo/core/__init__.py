"""Core YOLO utilities (constants, preprocess, postprocess)."""

from __future__ import annotations

from occupancy_watch.yolo.core.constants import CLASS_NAMES, class_label
from occupancy_watch.yolo.core.postprocess import postprocess
from occupancy_watch.yolo.core.preprocess import infer_input_size, preprocess


__all__ = [
    "CLASS_NAMES",
    "class_label",
    "infer_input_size",
    "postprocess",
    "preprocess",
]
