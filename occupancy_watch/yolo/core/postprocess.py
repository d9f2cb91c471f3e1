"""Decode YOLO ONNX outputs into frame-space detections."""

from __future__ import annotations

from typing import TYPE_CHECKING

import cv2
import numpy as np
from loguru import logger

from occupancy_watch.pipeline.types import Detection
from occupancy_watch.yolo.core.constants import class_label


if TYPE_CHECKING:
    from collections.abc import Sequence

    from occupancy_watch.yolo.core.preprocess import Letterbox


def _xywh_to_xyxy(boxes: np.ndarray) -> np.ndarray:
    x, y, w, h = boxes.T
    return np.stack([x - w / 2, y - h / 2, x + w / 2, y + h / 2], axis=1)


def _squeeze_to_2d(arr: np.ndarray) -> np.ndarray:
    data = np.squeeze(np.asarray(arr))
    if data.ndim == 3 and data.shape[0] == 1:
        data = data[0]
    return data


def _to_detections(
    boxes_xyxy: np.ndarray,
    scores: np.ndarray,
    class_ids: np.ndarray,
    letterbox: Letterbox,
    score_floor: float,
) -> list[Detection]:
    detections: list[Detection] = []
    for box, score, class_id in zip(boxes_xyxy, scores, class_ids, strict=False):
        if score < score_floor:
            continue
        x1, y1 = letterbox.to_frame(float(box[0]), float(box[1]))
        x2, y2 = letterbox.to_frame(float(box[2]), float(box[3]))
        detections.append(
            Detection(
                bbox=(x1, y1, x2 - x1, y2 - y1),
                label=class_label(int(class_id)),
                score=float(score),
            )
        )
    return detections


def _decode_triplet(
    outputs: Sequence[np.ndarray],
    input_size: tuple[int, int],
    letterbox: Letterbox,
    score_floor: float,
) -> list[Detection] | None:
    if len(outputs) < 3:
        return None
    boxes = _squeeze_to_2d(outputs[0])
    if not (boxes.ndim == 2 and boxes.shape[-1] == 4):
        return None
    scores = _squeeze_to_2d(outputs[1]).reshape(-1)
    class_ids = _squeeze_to_2d(outputs[2]).reshape(-1)

    height, width = input_size
    if boxes.size and np.max(boxes) <= 1.5:
        boxes = boxes * np.array([width, height, width, height], dtype=np.float32)
    return _to_detections(boxes, scores, class_ids, letterbox, score_floor)


def _decode_single(
    output: np.ndarray,
    input_size: tuple[int, int],
    letterbox: Letterbox,
    score_floor: float,
    nms_iou: float,
) -> list[Detection]:
    data = _squeeze_to_2d(output)
    if data.ndim == 2 and data.shape[0] < data.shape[1] and data.shape[0] >= 6:
        data = data.T
    if data.ndim != 2 or data.shape[1] < 6:
        return []

    height, width = input_size
    scale = np.array([width, height, width, height], dtype=np.float32)

    if data.shape[1] == 6:
        # End-to-end export: x1, y1, x2, y2, score, class.
        boxes = data[:, :4]
        if boxes.size and np.max(boxes) <= 1.5:
            boxes = boxes * scale
        return _to_detections(
            boxes, data[:, 4], data[:, 5].astype(int), letterbox, score_floor
        )

    boxes = data[:, :4]
    class_scores = data[:, 4:]
    class_ids = np.argmax(class_scores, axis=1)
    scores = class_scores[np.arange(len(class_ids)), class_ids]
    if boxes.size and np.max(boxes) <= 1.5:
        boxes = boxes * scale

    keep = scores >= score_floor
    boxes, scores, class_ids = boxes[keep], scores[keep], class_ids[keep]
    if len(boxes) == 0:
        return []

    nms_boxes = [
        [float(cx - w / 2), float(cy - h / 2), float(w), float(h)]
        for cx, cy, w, h in boxes
    ]
    indices = cv2.dnn.NMSBoxes(nms_boxes, scores.tolist(), score_floor, nms_iou)
    indices = np.asarray(indices, dtype=int).reshape(-1)
    return _to_detections(
        _xywh_to_xyxy(boxes[indices]),
        scores[indices],
        class_ids[indices],
        letterbox,
        score_floor,
    )


def postprocess(
    outputs: Sequence[np.ndarray],
    letterbox: Letterbox,
    input_size: tuple[int, int],
    *,
    score_floor: float = 0.1,
    nms_iou: float = 0.45,
    debug_output: bool = False,
) -> list[Detection]:
    """Parse detection model outputs of any supported YOLO export layout."""
    if outputs is None or len(outputs) == 0:
        return []

    if debug_output:
        logger.info("Model outputs: {}", [np.asarray(out).shape for out in outputs])

    triplet = _decode_triplet(outputs, input_size, letterbox, score_floor)
    if triplet is not None:
        return triplet

    return _decode_single(outputs[0], input_size, letterbox, score_floor, nms_iou)
