"""Integration tests running the threaded detection loop end to end."""

from __future__ import annotations

import time
from pathlib import Path
from unittest.mock import Mock

import numpy as np

from occupancy_watch.pipeline.alerts import AlertEmitter
from occupancy_watch.pipeline.config import MonitorConfig
from occupancy_watch.pipeline.events import EventLog
from occupancy_watch.pipeline.recording import CaptureManager
from occupancy_watch.pipeline.session import MonitorSession
from occupancy_watch.pipeline.types import Detection, SessionState, SourceKind


class _ScriptedModel:
    def __init__(self, counts: list[int], *, delay_s: float = 0.0) -> None:
        self.counts = list(counts)
        self.delay_s = delay_s
        self.calls = 0

    def load(self) -> None:
        return None

    def ready(self) -> bool:
        return True

    def detect(self, frame: np.ndarray) -> list[Detection]:
        self.calls += 1
        if self.delay_s:
            time.sleep(self.delay_s)
        count = self.counts.pop(0) if self.counts else 0
        return [
            Detection(bbox=(float(4 * i), 4.0, 10.0, 20.0), label="person", score=0.9)
            for i in range(count)
        ]


class _FileSource:
    def __init__(self, n_frames: int | None) -> None:
        self.remaining = n_frames
        self.closed = False

    def open(self) -> bool:
        return True

    def read_frame(self) -> np.ndarray | None:
        if self.remaining is not None:
            if self.remaining == 0:
                return None
            self.remaining -= 1
        return np.zeros((48, 64, 3), dtype=np.uint8)

    def close(self) -> None:
        self.closed = True


class _MemorySink:
    def __init__(self) -> None:
        self.frames: list[np.ndarray] = []

    def save_image(self, image: np.ndarray, capture_id: str) -> Path:
        return Path(f"capture_{capture_id}.png")

    def open_video(self, width: int, height: int, fps: float) -> _MemorySink:
        return self

    def write(self, frame: np.ndarray) -> None:
        self.frames.append(frame)

    def finalize(self) -> Path:
        return Path("recording.mp4")


def _wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _session(model, source, sink=None, channel=None, **config) -> MonitorSession:
    log = EventLog()
    return MonitorSession(
        model,
        config=MonitorConfig(mode="fast", **config),
        event_log=log,
        alert_emitter=AlertEmitter(log, channel),
        capture=CaptureManager(log, sink),
        source_factory=lambda kind, camera=None, path=None: source,
    )


def test_file_runs_to_completion() -> None:
    """A finite file is processed to the end and the session halts itself."""
    source = _FileSource(5)
    channel = Mock()
    session = _session(
        _ScriptedModel([1, 3, 4, 2, 0]), source, channel=channel, alert_threshold=3
    )

    assert session.start(SourceKind.FILE, path="clip.mp4") is True
    assert _wait_for(lambda: session.state is SessionState.IDLE)

    stats = session.stats
    assert stats.frames_processed == 5
    assert stats.peak_count == 4
    assert stats.total_detections == 4
    assert stats.current_count == 0
    assert source.closed is True
    # 3 and 4 arrive within the cooldown window of each other
    assert channel.play.call_count == 1
    assert session.event_log.entries[0].message == (
        "Video source ended. Monitoring halted."
    )


def test_stop_discards_in_flight_cycle() -> None:
    """Stopping mid-inference never applies the in-flight result."""
    model = _ScriptedModel([2] * 100, delay_s=0.2)
    session = _session(model, _FileSource(None))

    session.start(SourceKind.LIVE)
    assert _wait_for(lambda: model.calls >= 1)
    session.stop()
    frames_after_stop = session.stats.frames_processed
    time.sleep(0.3)

    assert session.state is SessionState.IDLE
    assert session.stats.frames_processed == frames_after_stop


def test_recording_while_monitoring() -> None:
    """Recording collects composited frames until the session stops."""
    sink = _MemorySink()
    session = _session(_ScriptedModel([1] * 1000), _FileSource(None), sink)

    session.start(SourceKind.LIVE)
    assert _wait_for(lambda: session.latest_snapshot() is not None)
    assert session.start_recording() is True
    assert _wait_for(lambda: len(sink.frames) >= 3)

    session.stop()

    assert session.state is SessionState.IDLE
    assert session.capture.is_recording is False
    assert "Recording saved: recording.mp4" in [
        e.message for e in session.event_log.entries
    ]
