"""Snapshot and continuous-recording bookkeeping for a monitoring session."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from occupancy_watch.pipeline.events import format_clock_time, new_entry_id
from occupancy_watch.pipeline.types import Screenshot, Severity
from occupancy_watch.yolo.ui.draw import draw_detections


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    import numpy as np

    from occupancy_watch.pipeline.capture.export import ExportSink, VideoArtifact
    from occupancy_watch.pipeline.events import EventLog
    from occupancy_watch.pipeline.types import Detection, FrameSnapshot

    Compositor = Callable[[np.ndarray, Sequence[Detection]], np.ndarray]


RECORD_FPS = 30.0


@dataclass
class _ActiveRecording:
    artifact: VideoArtifact
    provider: Callable[[], FrameSnapshot | None]
    on_interrupted: Callable[[], None] | None
    stop_event: threading.Event = field(default_factory=threading.Event)
    thread: threading.Thread | None = None


class CaptureManager:
    """Create screenshots and drive the recording draw loop.

    Both operations composite the frame and detections of the most recent
    applied detection cycle; neither mutates the frame they are handed.
    """

    def __init__(
        self,
        event_log: EventLog,
        export_sink: ExportSink | None = None,
        *,
        record_fps: float = RECORD_FPS,
        clock: Callable[[], float] = time.time,
        compose: Compositor = draw_detections,
    ) -> None:
        """Create a manager with no screenshots and no active recording."""
        self.event_log = event_log
        self.export_sink = export_sink
        self.record_fps = record_fps
        self._clock = clock
        self._compose = compose
        self._screenshots: list[Screenshot] = []
        self._recording: _ActiveRecording | None = None
        self._lock = threading.Lock()

    @property
    def screenshots(self) -> list[Screenshot]:
        """Return captured screenshots, newest first."""
        with self._lock:
            return list(self._screenshots)

    @property
    def is_recording(self) -> bool:
        """Return True while a recording loop is active."""
        with self._lock:
            return self._recording is not None

    def capture_snapshot(
        self, snapshot: FrameSnapshot | None, count: int
    ) -> Screenshot | None:
        """Composite the latest frame with its annotations and store it."""
        if snapshot is None:
            self.event_log.add("No frame available for screenshot.", Severity.WARNING)
            return None

        image = self._compose(snapshot.frame, snapshot.detections)
        shot = Screenshot(
            id=new_entry_id(),
            image=image,
            timestamp=format_clock_time(self._clock()),
            count=count,
        )
        if self.export_sink is not None:
            try:
                shot.path = self.export_sink.save_image(image, shot.id)
            except Exception as exc:
                logger.warning("Screenshot export failed: {}", exc)

        with self._lock:
            self._screenshots.insert(0, shot)
        self.event_log.add("Manual screenshot captured.", Severity.SUCCESS)
        return shot

    def start_recording(
        self,
        provider: Callable[[], FrameSnapshot | None],
        on_interrupted: Callable[[], None] | None = None,
    ) -> bool:
        """Start compositing ``provider`` frames into a new video artifact."""
        if self.export_sink is None:
            self.event_log.add(
                "Recording unavailable: no export sink configured.", Severity.WARNING
            )
            return False

        with self._lock:
            if self._recording is not None:
                logger.debug("Recording already active")
                return False

            first = provider()
            if first is None:
                self.event_log.add(
                    "Recording not started: no frame available.", Severity.WARNING
                )
                return False

            height, width = first.frame.shape[:2]
            try:
                artifact = self.export_sink.open_video(width, height, self.record_fps)
            except Exception as exc:
                self.event_log.add(f"Failed to start recording: {exc}", Severity.ERROR)
                return False

            rec = _ActiveRecording(
                artifact=artifact, provider=provider, on_interrupted=on_interrupted
            )
            rec.thread = threading.Thread(
                target=self._record_loop,
                args=(rec,),
                name="occupancy-recorder",
                daemon=True,
            )
            self._recording = rec
            rec.thread.start()

        self.event_log.add("Video recording started.", Severity.INFO)
        return True

    def stop_recording(self) -> Path | None:
        """Stop the draw loop, finalize the artifact and return its path."""
        with self._lock:
            rec = self._recording
            self._recording = None
        if rec is None:
            return None

        rec.stop_event.set()
        if rec.thread is not None and rec.thread is not threading.current_thread():
            rec.thread.join(timeout=5.0)

        path = self._finalize(rec)
        if path is not None:
            self.event_log.add(f"Recording saved: {path.name}", Severity.SUCCESS)
        return path

    def _record_loop(self, rec: _ActiveRecording) -> None:
        interval = 1.0 / self.record_fps
        next_tick = time.monotonic()
        reason = None
        while not rec.stop_event.is_set():
            snapshot = rec.provider()
            if snapshot is None:
                reason = "frame source unavailable"
                break
            try:
                rec.artifact.write(self._compose(snapshot.frame, snapshot.detections))
            except Exception as exc:
                reason = f"write failed ({exc})"
                break
            # Deadline pacing keeps the output at record_fps despite slow frames.
            next_tick += interval
            rec.stop_event.wait(max(0.0, next_tick - time.monotonic()))

        if reason is not None:
            self._interrupt(rec, reason)

    def _interrupt(self, rec: _ActiveRecording, reason: str) -> None:
        with self._lock:
            if self._recording is not rec:
                return
            self._recording = None

        self._finalize(rec)
        self.event_log.add(f"Recording stopped: {reason}.", Severity.WARNING)
        if rec.on_interrupted is not None:
            rec.on_interrupted()

    def _finalize(self, rec: _ActiveRecording) -> Path | None:
        try:
            return rec.artifact.finalize()
        except Exception as exc:
            self.event_log.add(f"Failed to finalize recording: {exc}", Severity.ERROR)
            return None
