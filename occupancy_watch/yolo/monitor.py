"""Main entry point for the occupancy monitoring pipeline."""

from __future__ import annotations

import platform
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import cv2
from loguru import logger

from occupancy_watch.monitoring.plotting import TrendPlotter
from occupancy_watch.pipeline.alerts import AlertEmitter, TwoToneAlertChannel
from occupancy_watch.pipeline.capture.export import OpenCVExportSink
from occupancy_watch.pipeline.config import MonitorConfig
from occupancy_watch.pipeline.events import EventLog
from occupancy_watch.pipeline.logging import configure_logging
from occupancy_watch.pipeline.recording import CaptureManager
from occupancy_watch.pipeline.session import MonitorSession
from occupancy_watch.pipeline.types import CameraConfig, SessionState, SourceKind
from occupancy_watch.yolo.cli import parse_args
from occupancy_watch.yolo.detector import OnnxYoloDetector
from occupancy_watch.yolo.ui.draw import draw_detections, draw_status_panel


if TYPE_CHECKING:
    import argparse
    from collections.abc import Sequence

    import numpy as np

    from occupancy_watch.pipeline.types import Detection


WINDOW_NAME = "Occupancy Monitor"
STATS_LOG_INTERVAL_S = 2.0


class MonitorInitError(RuntimeError):
    """Raised when monitor initialization fails."""


class AnnotatedFrameSlot:
    """Hold the most recent annotated frame for the display thread."""

    def __init__(self) -> None:
        """Create an empty slot."""
        self._frame: np.ndarray | None = None
        self._lock = threading.Lock()

    def update(self, frame: np.ndarray, detections: Sequence[Detection]) -> None:
        """Annotation sink: draw detections onto a copy and keep it."""
        annotated = draw_detections(frame, detections)
        with self._lock:
            self._frame = annotated

    def latest(self) -> np.ndarray | None:
        """Return a copy of the newest annotated frame."""
        with self._lock:
            return None if self._frame is None else self._frame.copy()


@dataclass
class MonitorContext:
    """Static context for running the display loop."""

    args: argparse.Namespace
    session: MonitorSession
    display: AnnotatedFrameSlot


def _build_config(args: argparse.Namespace) -> MonitorConfig:
    try:
        return MonitorConfig(
            alert_threshold=args.threshold,
            confidence=args.conf,
            mode=args.mode,
            sound_enabled=not args.no_sound,
            target_label=args.target,
            reset_stats_on_start=args.reset_stats_on_start,
        )
    except (TypeError, ValueError) as exc:
        logger.error("Invalid configuration: {}", exc)
        message = "Invalid configuration"
        raise MonitorInitError(message) from exc


def _build_context(args: argparse.Namespace) -> MonitorContext:
    logger.info("=" * 60)
    logger.info("Occupancy Monitor")
    logger.info("=" * 60)
    logger.info("Platform: {} {}", platform.system(), platform.release())
    logger.info("Python: {}", platform.python_version())
    logger.info("OpenCV: {}", cv2.__version__)

    config = _build_config(args)
    logger.info(
        "Threshold: {} | Confidence: {:.0%} | Mode: {} | Sound: {}",
        config.alert_threshold,
        config.confidence,
        config.mode.value,
        "on" if config.sound_enabled else "off",
    )

    event_log = EventLog()
    display = AnnotatedFrameSlot()
    session = MonitorSession(
        OnnxYoloDetector(args.model, gpu=args.gpu, debug_output=args.debug_output),
        config=config,
        event_log=event_log,
        alert_emitter=AlertEmitter(event_log, TwoToneAlertChannel()),
        capture=CaptureManager(event_log, OpenCVExportSink(args.output_dir)),
        annotation_sink=display.update,
    )

    if not session.load_model():
        message = "Failed to load model"
        raise MonitorInitError(message)

    if args.source == "file":
        if not args.video:
            logger.error("--source file requires --video PATH")
            message = "Missing video path"
            raise MonitorInitError(message)
        started = session.start(SourceKind.FILE, path=args.video)
    else:
        camera = CameraConfig(
            device_index=args.camera,
            width=args.width,
            height=args.height,
            fps=args.fps,
        )
        started = session.start(SourceKind.LIVE, camera=camera)

    if not started:
        message = "Failed to start monitoring"
        raise MonitorInitError(message)

    return MonitorContext(args=args, session=session, display=display)


def _handle_key(ctx: MonitorContext, key: int) -> bool:
    if key == ord("q"):
        logger.info("Quit requested by user")
        return False
    if key == ord("s"):
        ctx.session.capture_snapshot()
    elif key == ord("r"):
        ctx.session.toggle_recording()
    return True


def _render(ctx: MonitorContext) -> bool:
    frame = ctx.display.latest()
    if frame is not None:
        session = ctx.session
        draw_status_panel(
            frame,
            session.stats,
            session.metrics,
            threshold=session.config.alert_threshold,
            duration=session.session_duration(),
            recording=session.state is SessionState.MONITORING_AND_RECORDING,
        )
        cv2.imshow(WINDOW_NAME, frame)
    return _handle_key(ctx, cv2.waitKey(15) & 0xFF)


def _log_periodic_stats(ctx: MonitorContext, last_log_time: float) -> float:
    now = time.perf_counter()
    if now - last_log_time < STATS_LOG_INTERVAL_S:
        return last_log_time
    session = ctx.session
    stats = session.stats
    metrics = session.metrics
    logger.info(
        "People: {} | Peak: {} | Frames with people: {} | FPS: {} | "
        "Inference: {:.1f}ms | {}",
        stats.current_count,
        stats.peak_count,
        stats.total_detections,
        metrics.fps,
        metrics.inference_ms,
        session.occupancy_status(),
    )
    return now


def _log_summary(ctx: MonitorContext) -> None:
    session = ctx.session
    stats = session.stats
    logger.info("=" * 60)
    logger.info("Session Summary")
    logger.info("Frames processed: {}", stats.frames_processed)
    logger.info("Peak occupancy: {}", stats.peak_count)
    logger.info("Average occupancy: {:.2f}", stats.avg_count)
    logger.info("Frames with people: {}", stats.total_detections)
    logger.info("Screenshots: {}", len(session.screenshots))


def _save_trend_plot(ctx: MonitorContext) -> None:
    path = ctx.args.trend_plot
    points = ctx.session.trend
    if not path:
        return
    if not points:
        logger.warning("No trend samples collected, skipping chart")
        return
    plotter = TrendPlotter(points, threshold=ctx.session.config.alert_threshold)
    try:
        plotter.save_figure(path)
    finally:
        plotter.close()


def _run_display_loop(ctx: MonitorContext) -> int:
    logger.info("-" * 60)
    if ctx.args.no_display:
        logger.info("Running headless. Press Ctrl+C to stop.")
    else:
        logger.info("Press 's' screenshot, 'r' record, 'q' quit.")
    logger.info("-" * 60)

    record_pending = ctx.args.record
    last_log_time = time.perf_counter()
    try:
        while ctx.session.state.is_active:
            if record_pending and ctx.session.latest_snapshot() is not None:
                ctx.session.start_recording()
                record_pending = False

            if ctx.args.no_display:
                time.sleep(0.05)
            elif not _render(ctx):
                break
            last_log_time = _log_periodic_stats(ctx, last_log_time)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        ctx.session.stop()
        _log_summary(ctx)
        _save_trend_plot(ctx)
        if not ctx.args.no_display:
            cv2.destroyAllWindows()
        logger.success("Cleanup complete. Goodbye!")

    return 0


def run_occupancy_monitor(argv: list[str] | None = None) -> int:
    """Entry point for running the occupancy monitor."""
    args = parse_args(argv)
    configure_logging(args.log_level, json_logs=args.json_logs)
    try:
        ctx = _build_context(args)
    except MonitorInitError:
        return 1
    return _run_display_loop(ctx)


if __name__ == "__main__":
    raise SystemExit(run_occupancy_monitor())
