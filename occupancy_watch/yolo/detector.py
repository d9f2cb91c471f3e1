"""ONNX Runtime YOLO detector used as the session's detection model."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import numpy as np
import onnxruntime as ort
from loguru import logger

from occupancy_watch.yolo.core.postprocess import postprocess
from occupancy_watch.yolo.core.preprocess import infer_input_size, preprocess


if TYPE_CHECKING:
    from occupancy_watch.pipeline.types import Detection


class DetectionModel(Protocol):
    """Opaque object detector consumed by the monitoring session."""

    def load(self) -> None:
        """Prepare the model; raise on failure."""
        ...

    def ready(self) -> bool:
        """Return True once :meth:`detect` may be called."""
        ...

    def detect(self, frame: np.ndarray) -> list[Detection]:
        """Return all detections in ``frame``."""
        ...


class OnnxYoloDetector:
    """Run a YOLO ONNX export and return frame-space detections."""

    def __init__(
        self,
        model_path: str | Path,
        *,
        gpu: int = 0,
        score_floor: float = 0.1,
        debug_output: bool = False,
    ) -> None:
        """Configure the detector; the session is created by :meth:`load`."""
        self.model_path = Path(model_path)
        self.gpu = gpu
        self.score_floor = score_floor
        self.debug_output = debug_output
        self.session: ort.InferenceSession | None = None
        self.input_name = ""
        self.input_size = (640, 640)

    def load(self) -> None:
        """Create the inference session, preferring CUDA when available."""
        if not self.model_path.is_file():
            message = f"Model file not found: {self.model_path}"
            raise FileNotFoundError(message)

        providers = [
            (
                "CUDAExecutionProvider",
                {"device_id": self.gpu, "arena_extend_strategy": "kNextPowerOfTwo"},
            ),
            "CPUExecutionProvider",
        ]
        logger.info("Loading model: {}", self.model_path)
        self.session = ort.InferenceSession(str(self.model_path), providers=providers)

        model_input = self.session.get_inputs()[0]
        self.input_name = model_input.name
        self.input_size = infer_input_size(model_input.shape)
        logger.success(
            "Model loaded using: {} (input {} {})",
            self.session.get_providers()[0],
            self.input_name,
            self.input_size,
        )

    def ready(self) -> bool:
        """Return True once the inference session exists."""
        return self.session is not None

    def detect(self, frame: np.ndarray) -> list[Detection]:
        """Run inference on one BGR frame."""
        if self.session is None:
            message = "Detector used before load()"
            raise RuntimeError(message)

        blob, letterbox = preprocess(frame, input_size=self.input_size)
        outputs = self.session.run(None, {self.input_name: blob})

        detections = postprocess(
            [np.asarray(output) for output in outputs],
            letterbox,
            self.input_size,
            score_floor=self.score_floor,
            debug_output=self.debug_output,
        )
        self.debug_output = False
        return detections
