"""YOLO detection backend and command line runner."""

from __future__ import annotations

from occupancy_watch.yolo.cli import parse_args
from occupancy_watch.yolo.detector import DetectionModel, OnnxYoloDetector


__all__ = ["DetectionModel", "OnnxYoloDetector", "parse_args"]
