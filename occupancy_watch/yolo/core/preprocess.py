"""Letterbox preprocessing for YOLO ONNX models."""

from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np


DEFAULT_INPUT_SIZE = (640, 640)


@dataclass(frozen=True)
class Letterbox:
    """Scale and padding applied to map model coordinates back to the frame."""

    scale: float
    pad_x: int
    pad_y: int

    def to_frame(self, x: float, y: float) -> tuple[float, float]:
        """Map a point from model input space to frame pixels."""
        return (x - self.pad_x) / self.scale, (y - self.pad_y) / self.scale


def infer_input_size(input_shape: list[object] | None) -> tuple[int, int]:
    """Infer (height, width) from an ONNX input shape."""
    if not input_shape or len(input_shape) < 4:
        return DEFAULT_INPUT_SIZE

    height = input_shape[-2]
    width = input_shape[-1]
    if isinstance(height, int) and isinstance(width, int):
        return (height, width)
    return DEFAULT_INPUT_SIZE


def preprocess(
    frame: np.ndarray, input_size: tuple[int, int] = DEFAULT_INPUT_SIZE
) -> tuple[np.ndarray, Letterbox]:
    """Resize with padding and convert a BGR frame into an NCHW float blob."""
    original_h, original_w = frame.shape[:2]

    scale = min(input_size[0] / original_h, input_size[1] / original_w)
    new_w, new_h = int(original_w * scale), int(original_h * scale)
    resized = cv2.resize(frame, (new_w, new_h))

    padded = np.full((input_size[0], input_size[1], 3), 114, dtype=np.uint8)
    pad_x, pad_y = (input_size[1] - new_w) // 2, (input_size[0] - new_h) // 2
    padded[pad_y : pad_y + new_h, pad_x : pad_x + new_w] = resized

    blob = padded[:, :, ::-1].astype(np.float32) / 255.0
    blob = blob.transpose(2, 0, 1)[np.newaxis, ...]
    return blob, Letterbox(scale=scale, pad_x=pad_x, pad_y=pad_y)
