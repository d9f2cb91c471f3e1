"""Monitoring session lifecycle and the detection loop it schedules."""

from __future__ import annotations

import threading
import time
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from occupancy_watch.pipeline.alerts import AlertEmitter, TwoToneAlertChannel
from occupancy_watch.pipeline.capture.core import create_frame_source
from occupancy_watch.pipeline.config import MonitorConfig
from occupancy_watch.pipeline.events import EventLog
from occupancy_watch.pipeline.filtering import filter_detections
from occupancy_watch.pipeline.metrics.stats import StatsAggregator
from occupancy_watch.pipeline.metrics.telemetry import TelemetryTracker
from occupancy_watch.pipeline.recording import CaptureManager
from occupancy_watch.pipeline.types import (
    FrameSnapshot,
    SessionState,
    Severity,
    SourceKind,
)


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    import numpy as np

    from occupancy_watch.pipeline.capture.core import FrameSource
    from occupancy_watch.pipeline.types import (
        CameraConfig,
        Detection,
        PerformanceMetrics,
        Screenshot,
        Stats,
        TrendPoint,
    )
    from occupancy_watch.yolo.detector import DetectionModel

    AnnotationSink = Callable[[np.ndarray, Sequence[Detection]], None]
    SourceFactory = Callable[..., FrameSource]


WORKER_JOIN_TIMEOUT_S = 5.0


class MonitorSession:
    """Idle / monitoring / recording state machine around the detection loop.

    Each started run owns a cancellation token. The worker waits on that token
    between cycles, and a cycle's results are applied only while the token is
    clear, so results that complete after :meth:`stop` are discarded.
    """

    def __init__(
        self,
        model: DetectionModel,
        *,
        config: MonitorConfig | None = None,
        event_log: EventLog | None = None,
        alert_emitter: AlertEmitter | None = None,
        capture: CaptureManager | None = None,
        source_factory: SourceFactory = create_frame_source,
        annotation_sink: AnnotationSink | None = None,
        clock: Callable[[], float] = time.time,
        autorun: bool = True,
    ) -> None:
        """Wire the session collaborators; the session starts idle."""
        self.model = model
        self.event_log = event_log or EventLog(clock=clock)
        self.alerts = alert_emitter or AlertEmitter(
            self.event_log, TwoToneAlertChannel()
        )
        self.capture = capture or CaptureManager(self.event_log, clock=clock)
        self.stats_aggregator = StatsAggregator()
        self.telemetry = TelemetryTracker(clock())

        self._config = config or MonitorConfig()
        self._source_factory = source_factory
        self._annotation_sink = annotation_sink
        self._clock = clock
        self._autorun = autorun

        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self._model_failed = False
        self._token: threading.Event | None = None
        self._source: FrameSource | None = None
        self._worker: threading.Thread | None = None
        self._latest: FrameSnapshot | None = None

    @property
    def state(self) -> SessionState:
        """Return the current lifecycle state."""
        with self._lock:
            return self._state

    @property
    def config(self) -> MonitorConfig:
        """Return the active configuration."""
        return self._config

    @property
    def model_ready(self) -> bool:
        """Return True when the detection model can serve a session."""
        return not self._model_failed and self.model.ready()

    @property
    def can_start(self) -> bool:
        """Return True when :meth:`start` would be accepted."""
        return self.state is SessionState.IDLE and self.model_ready

    @property
    def stats(self) -> Stats:
        """Return a copy of the running counters."""
        with self._lock:
            return self.stats_aggregator.snapshot()

    @property
    def trend(self) -> list[TrendPoint]:
        """Return the rolling trend, oldest first."""
        with self._lock:
            return self.telemetry.trend_points()

    @property
    def metrics(self) -> PerformanceMetrics:
        """Return the detection-loop FPS and inference timings."""
        with self._lock:
            return self.telemetry.get_metrics()

    @property
    def screenshots(self) -> list[Screenshot]:
        """Return captured screenshots, newest first."""
        return self.capture.screenshots

    def latest_snapshot(self) -> FrameSnapshot | None:
        """Return the frame and detections of the last applied cycle."""
        with self._lock:
            return self._latest

    def session_duration(self, now: float | None = None) -> str:
        """Return elapsed session time as ``MM:SS``; ``00:00`` when idle."""
        with self._lock:
            start = self.stats_aggregator.snapshot().session_start_time
            if not self._state.is_active or start is None:
                return "00:00"
        seconds = max(0, int((self._clock() if now is None else now) - start))
        return f"{seconds // 60:02d}:{seconds % 60:02d}"

    def occupancy_status(self) -> str:
        """Return the headline status for the current count."""
        over = self.stats.current_count >= self._config.alert_threshold
        return "Crowd Alert" if over else "Normal Activity"

    def update_config(self, **changes: object) -> MonitorConfig:
        """Replace configuration fields; takes effect from the next cycle."""
        config = replace(self._config, **changes)
        self._config = config
        logger.info("Configuration updated: {}", changes)
        return config

    def reset_stats(self) -> bool:
        """Zero counters and trend history; only allowed while idle."""
        with self._lock:
            active = self._state.is_active
            if not active:
                self.stats_aggregator.reset()
                self.telemetry.clear_trend()
        if active:
            self.event_log.add(
                "Statistics can only be reset while idle.", Severity.WARNING
            )
            return False
        self.event_log.add("Session statistics reset.", Severity.INFO)
        return True

    def load_model(self) -> bool:
        """Load the detection model; a failure leaves the session unstartable."""
        try:
            self.model.load()
        except Exception as exc:
            logger.error("Model loading failed: {}", exc)
            self.mark_model_failed()
            return False

        self._model_failed = False
        self.event_log.add("Neural network initialized and ready.", Severity.SUCCESS)
        return True

    def mark_model_failed(self) -> None:
        """Force the session idle and block :meth:`start` until a reload."""
        self._halt("Monitoring halted.")
        self._model_failed = True
        self.event_log.add("Failed to initialize detection engine.", Severity.ERROR)

    def start(
        self,
        kind: SourceKind | str = SourceKind.LIVE,
        *,
        camera: CameraConfig | None = None,
        path: str | Path | None = None,
    ) -> bool:
        """Open a frame source and begin detection cycles."""
        kind = SourceKind(kind)
        with self._lock:
            state = self._state
        if state is not SessionState.IDLE:
            logger.debug("Start ignored: session is {}", state.value)
            return False
        if not self.model_ready:
            self.event_log.add("Detection model is not ready.", Severity.ERROR)
            return False

        # Opening a camera can block; keep the lock free for readers meanwhile.
        source = self._open_source(kind, camera, path)
        if source is None:
            return False

        with self._lock:
            if self._state is not SessionState.IDLE:
                logger.debug("Start lost to a concurrent start")
                won = False
            else:
                won = True
                self._commit_start(kind, path, source)
        if not won:
            source.close()
        return won

    def _commit_start(
        self, kind: SourceKind, path: str | Path | None, source: FrameSource
    ) -> None:
        now = self._clock()
        if self._config.reset_stats_on_start:
            self.stats_aggregator.reset()
            self.telemetry.clear_trend()
        self.stats_aggregator.mark_session_start(now)
        self.telemetry.restart_window(now)

        token = threading.Event()
        self._token = token
        self._source = source
        self._latest = None
        self._state = SessionState.MONITORING

        if kind is SourceKind.LIVE:
            self.event_log.add(
                "Live monitoring started via webcam.", Severity.SUCCESS
            )
        else:
            self.event_log.add(
                f"Processing video file: {Path(path).name}", Severity.INFO
            )

        if self._autorun:
            self._worker = threading.Thread(
                target=self._run_loop,
                args=(token, source),
                name="occupancy-detection",
                daemon=True,
            )
            self._worker.start()

    def stop(self) -> bool:
        """Stop monitoring; a no-op while idle."""
        return self._halt("Monitoring halted.")

    def _open_source(
        self,
        kind: SourceKind,
        camera: CameraConfig | None,
        path: str | Path | None,
    ) -> FrameSource | None:
        try:
            source = self._source_factory(kind, camera=camera, path=path)
            opened = source.open()
        except Exception as exc:
            logger.error("Frame source failed to open: {}", exc)
            opened = False

        if opened:
            return source
        if kind is SourceKind.LIVE:
            self.event_log.add(
                "Failed to access camera. Check permissions.", Severity.ERROR
            )
        else:
            self.event_log.add(f"Failed to open video file: {path}", Severity.ERROR)
        return None

    def _halt(self, message: str) -> bool:
        with self._lock:
            state = self._state
        if state is SessionState.IDLE:
            return False
        # Finalize while frames are still served so the recording ends cleanly.
        if state is SessionState.MONITORING_AND_RECORDING:
            self.capture.stop_recording()

        with self._lock:
            if self._state is SessionState.IDLE:
                return False
            token, worker, source = self._token, self._worker, self._source
            self._token = None
            self._worker = None
            self._source = None
            self._state = SessionState.IDLE
            if token is not None:
                token.set()

        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=WORKER_JOIN_TIMEOUT_S)
            if worker.is_alive():
                logger.warning("Detection worker still busy after stop")

        if source is not None:
            try:
                source.close()
            except Exception as exc:
                logger.warning("Failed to release frame source: {}", exc)

        self.event_log.add(message, Severity.WARNING)
        return True

    def step(self) -> bool:
        """Run one detection cycle of the active run; False once it has ended."""
        with self._lock:
            token, source = self._token, self._source
        if token is None or source is None or token.is_set():
            return False
        return self._run_cycle(token, source)

    def _run_loop(self, token: threading.Event, source: FrameSource) -> None:
        logger.info("Detection loop started")
        while not token.is_set():
            if not self._run_cycle(token, source):
                break
            if token.wait(self._config.cycle_delay_s):
                break
        logger.info("Detection loop finished")

    def _run_cycle(self, token: threading.Event, source: FrameSource) -> bool:
        config = self._config

        try:
            frame = source.read_frame()
        except Exception as exc:
            if token.is_set():
                return False
            self.event_log.add(f"Frame read failed: {exc}", Severity.WARNING)
            return True

        if frame is None:
            if not token.is_set():
                self._halt("Video source ended. Monitoring halted.")
            return False

        started = time.perf_counter()
        try:
            raw = self.model.detect(frame)
        except Exception as exc:
            if token.is_set():
                return False
            self.event_log.add(f"Detection cycle skipped: {exc}", Severity.WARNING)
            return True
        inference_ms = (time.perf_counter() - started) * 1000

        filtered = filter_detections(raw, config.target_label, config.confidence)
        now = self._clock()

        with self._lock:
            if token.is_set():
                logger.debug("Discarding result of a cycle finished after stop")
                return False
            self.stats_aggregator.update(filtered.count)
            self.telemetry.add_inference_time(inference_ms)
            self.telemetry.tick(filtered.count, now)
            self._latest = FrameSnapshot(
                frame=frame,
                detections=filtered.detections,
                count=filtered.count,
                timestamp=now,
            )

        if self._annotation_sink is not None:
            try:
                self._annotation_sink(frame, filtered.detections)
            except Exception as exc:
                logger.warning("Annotation sink failed: {}", exc)

        if token.is_set():
            return False
        self.alerts.maybe_alert(
            filtered.count, config.alert_threshold, config.sound_enabled, now
        )
        return True

    def capture_snapshot(self) -> Screenshot | None:
        """Store a composite of the latest annotated frame."""
        with self._lock:
            active = self._state.is_active
            snapshot = self._latest
            count = self.stats_aggregator.snapshot().current_count
        if not active:
            self.event_log.add(
                "Screenshot requires an active monitoring session.", Severity.WARNING
            )
            return None
        return self.capture.capture_snapshot(snapshot, count)

    def start_recording(self) -> bool:
        """Enter the recording sub-state while monitoring."""
        # Enter the sub-state first so an immediate interruption can leave it.
        with self._lock:
            state = self._state
            if state is SessionState.MONITORING:
                self._state = SessionState.MONITORING_AND_RECORDING
        if state is SessionState.IDLE:
            self.event_log.add(
                "Recording requires an active monitoring session.", Severity.WARNING
            )
            return False
        if state is SessionState.MONITORING_AND_RECORDING:
            self.event_log.add("Recording already in progress.", Severity.WARNING)
            return False

        if self.capture.start_recording(
            self._recording_frame, self._on_recording_interrupted
        ):
            return True

        with self._lock:
            if self._state is SessionState.MONITORING_AND_RECORDING:
                self._state = SessionState.MONITORING
        return False

    def stop_recording(self) -> Path | None:
        """Finalize the active recording and return to plain monitoring."""
        with self._lock:
            if self._state is not SessionState.MONITORING_AND_RECORDING:
                logger.debug("Stop recording ignored: {}", self._state.value)
                return None
            self._state = SessionState.MONITORING
        return self.capture.stop_recording()

    def toggle_recording(self) -> bool:
        """Start or stop recording; return True when now recording."""
        if self.state is SessionState.MONITORING_AND_RECORDING:
            self.stop_recording()
            return False
        return self.start_recording()

    def _recording_frame(self) -> FrameSnapshot | None:
        with self._lock:
            if not self._state.is_active:
                return None
            return self._latest

    def _on_recording_interrupted(self) -> None:
        with self._lock:
            if self._state is SessionState.MONITORING_AND_RECORDING:
                self._state = SessionState.MONITORING
