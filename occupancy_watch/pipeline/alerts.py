"""Cooldown-gated occupancy alerts and the audible alert channel."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol

import numpy as np
from loguru import logger

from occupancy_watch.pipeline.types import Severity


if TYPE_CHECKING:
    from occupancy_watch.pipeline.events import EventLog


try:
    import pyaudio

    PYAUDIO_AVAILABLE = True
except ImportError:
    PYAUDIO_AVAILABLE = False
    logger.warning("pyaudio not available - audible alerts disabled")


ALERT_COOLDOWN_S = 2.0


class AlertChannel(Protocol):
    """Fire-and-forget signal output."""

    def play(self) -> None:
        """Emit the alert signal without blocking the caller."""
        ...


def synthesize_two_tone(
    sample_rate: int = 44100,
    duration_s: float = 0.5,
    *,
    high_hz: float = 800.0,
    low_hz: float = 600.0,
    sweep_s: float = 0.1,
    gain: float = 0.05,
    final_gain: float = 0.001,
) -> np.ndarray:
    """Render a square-wave siren sweeping high -> low -> high with decaying gain."""
    n_samples = int(sample_rate * duration_s)
    t = np.arange(n_samples, dtype=np.float64) / sample_rate

    freq = np.interp(
        t,
        [0.0, sweep_s, 2 * sweep_s, duration_s],
        [high_hz, low_hz, high_hz, high_hz],
    )
    phase = 2 * np.pi * np.cumsum(freq) / sample_rate
    wave = np.sign(np.sin(phase))

    envelope = gain * (final_gain / gain) ** (t / duration_s)
    return (wave * envelope).astype(np.float32)


class TwoToneAlertChannel:
    """Play a short two-tone siren on the default audio output."""

    def __init__(self, sample_rate: int = 44100) -> None:
        """Pre-render the alert waveform."""
        self.sample_rate = sample_rate
        self.samples = synthesize_two_tone(sample_rate)

    def play(self) -> None:
        """Start playback on a daemon thread."""
        if not PYAUDIO_AVAILABLE:
            logger.debug("Alert tone skipped: no audio backend")
            return
        worker = threading.Thread(
            target=self._play_blocking,
            name="occupancy-alert-tone",
            daemon=True,
        )
        worker.start()

    def _play_blocking(self) -> None:
        audio = pyaudio.PyAudio()
        try:
            stream = audio.open(
                format=pyaudio.paFloat32,
                channels=1,
                rate=self.sample_rate,
                output=True,
            )
            try:
                stream.write(self.samples.tobytes())
            finally:
                stream.stop_stream()
                stream.close()
        except Exception as exc:
            logger.warning("Alert tone playback failed: {}", exc)
        finally:
            audio.terminate()


class AlertEmitter:
    """Rate-limit occupancy alerts with a per-instance cooldown.

    The cooldown timestamp belongs to the emitter, not to a session, so it
    carries over when monitoring is stopped and restarted.
    """

    def __init__(
        self,
        event_log: EventLog | None = None,
        channel: AlertChannel | None = None,
        cooldown_s: float = ALERT_COOLDOWN_S,
    ) -> None:
        """Create an emitter that has never fired."""
        self.event_log = event_log
        self.channel = channel
        self.cooldown_s = cooldown_s
        self.last_fired: float | None = None

    def maybe_alert(
        self,
        count: int,
        threshold: int,
        enabled: bool,
        now: float,
    ) -> bool:
        """Fire when enabled, at or over threshold and outside the cooldown."""
        if not enabled or count < threshold:
            return False
        if self.last_fired is not None and now - self.last_fired < self.cooldown_s:
            return False

        self.last_fired = now
        if self.event_log is not None:
            self.event_log.add(
                f"Occupancy threshold reached: {count} people (limit {threshold}).",
                Severity.ALERT,
            )
        if self.channel is not None:
            try:
                self.channel.play()
            except Exception as exc:
                logger.warning("Alert channel failed: {}", exc)
        return True
