"""Unit tests for YOLO preprocessing, output decoding and drawing."""

from __future__ import annotations

import numpy as np
import pytest

from occupancy_watch.pipeline.types import Detection
from occupancy_watch.yolo.core.constants import CLASS_NAMES, class_label
from occupancy_watch.yolo.core.postprocess import postprocess
from occupancy_watch.yolo.core.preprocess import Letterbox, infer_input_size, preprocess
from occupancy_watch.yolo.ui.draw import draw_detections, format_label


IDENTITY = Letterbox(scale=1.0, pad_x=0, pad_y=0)


class TestPreprocess:
    """Tests for letterbox preprocessing."""

    def test_blob_shape_and_padding(self) -> None:
        """Landscape frames are padded vertically to the model size."""
        frame = np.zeros((480, 640, 3), dtype=np.uint8)

        blob, letterbox = preprocess(frame, (640, 640))

        assert blob.shape == (1, 3, 640, 640)
        assert blob.dtype == np.float32
        assert letterbox.scale == pytest.approx(1.0)
        assert (letterbox.pad_x, letterbox.pad_y) == (0, 80)

    def test_letterbox_maps_back_to_frame(self) -> None:
        """Model coordinates are mapped back through scale and padding."""
        letterbox = Letterbox(scale=0.5, pad_x=0, pad_y=80)

        assert letterbox.to_frame(10.0, 90.0) == (20.0, 20.0)

    @pytest.mark.parametrize(
        ("shape", "expected"),
        [
            ([1, 3, 320, 416], (320, 416)),
            ([1, 3, "height", "width"], (640, 640)),
            (None, (640, 640)),
        ],
    )
    def test_infer_input_size(self, shape: list | None, expected: tuple) -> None:
        """Static shapes are honoured and dynamic ones fall back."""
        assert infer_input_size(shape) == expected


class TestPostprocess:
    """Tests for decoding raw model outputs."""

    def test_end_to_end_layout(self) -> None:
        """Six-channel rows decode to xywh detections above the floor."""
        output = np.array(
            [[[10, 20, 110, 220, 0.9, 0], [0, 0, 50, 50, 0.05, 2]]],
            dtype=np.float32,
        )

        detections = postprocess([output], IDENTITY, (640, 640))

        assert len(detections) == 1
        det = detections[0]
        assert det.label == "person"
        assert det.score == pytest.approx(0.9)
        assert det.bbox == pytest.approx((10.0, 20.0, 100.0, 200.0))

    def test_class_score_layout_applies_nms(self) -> None:
        """Overlapping boxes of the same class collapse to the best one."""
        data = np.zeros((4 + len(CLASS_NAMES), 100), dtype=np.float32)
        data[:4, 0] = [100, 100, 50, 50]
        data[:4, 1] = [102, 101, 50, 50]
        data[4 + 2, 0] = 0.9
        data[4 + 2, 1] = 0.8

        detections = postprocess([data[np.newaxis]], IDENTITY, (640, 640))

        assert len(detections) == 1
        assert detections[0].label == "car"
        assert detections[0].score == pytest.approx(0.9)
        assert detections[0].bbox == pytest.approx((75.0, 75.0, 50.0, 50.0))

    def test_empty_outputs(self) -> None:
        """No outputs means no detections."""
        assert postprocess([], IDENTITY, (640, 640)) == []

    def test_class_label_fallback(self) -> None:
        """Unknown class ids still produce a label."""
        assert class_label(0) == "person"
        assert class_label(999) != ""


class TestDraw:
    """Tests for annotation rendering."""

    def test_format_label(self) -> None:
        """Captions are upper-case class plus rounded percentage."""
        det = Detection(bbox=(0, 0, 1, 1), label="person", score=0.876)

        assert format_label(det) == "PERSON 88%"

    def test_draw_does_not_mutate_input(self) -> None:
        """Drawing happens on a copy of the frame."""
        frame = np.zeros((120, 160, 3), dtype=np.uint8)
        det = Detection(bbox=(20.0, 40.0, 60.0, 60.0), label="person", score=0.9)

        canvas = draw_detections(frame, [det])

        assert not frame.any()
        assert canvas.any()
        assert canvas.shape == frame.shape

    def test_boxes_outside_frame_are_skipped(self) -> None:
        """Degenerate boxes after clipping are not drawn."""
        frame = np.zeros((120, 160, 3), dtype=np.uint8)
        det = Detection(bbox=(500.0, 500.0, 20.0, 20.0), label="person", score=0.9)

        assert not draw_detections(frame, [det]).any()
