"""Unit tests for cooldown-gated alerts."""

from __future__ import annotations

from unittest.mock import Mock, patch

import numpy as np

from occupancy_watch.pipeline.alerts import (
    AlertEmitter,
    TwoToneAlertChannel,
    synthesize_two_tone,
)
from occupancy_watch.pipeline.events import EventLog
from occupancy_watch.pipeline.types import Severity


class TestAlertEmitter:
    """Tests for AlertEmitter cooldown behaviour."""

    def test_fires_respecting_cooldown(self) -> None:
        """Over-threshold counts inside the cooldown window are ignored."""
        emitter = AlertEmitter(cooldown_s=2.0)
        counts = [0, 4, 5, 4, 0, 4]
        fired_at = [
            0.5 * i
            for i, count in enumerate(counts)
            if emitter.maybe_alert(count, 3, True, 0.5 * i)
        ]

        assert fired_at == [0.5, 2.5]

    def test_first_alert_always_allowed(self) -> None:
        """An emitter that never fired does not wait for a cooldown."""
        emitter = AlertEmitter()

        assert emitter.maybe_alert(3, 3, True, 0.0) is True
        assert emitter.last_fired == 0.0

    def test_below_threshold_never_fires(self) -> None:
        """Counts under the threshold are not alerts."""
        emitter = AlertEmitter()

        assert emitter.maybe_alert(2, 3, True, 10.0) is False
        assert emitter.last_fired is None

    def test_disabled_never_fires(self) -> None:
        """Disabled alerts neither fire nor start a cooldown."""
        channel = Mock()
        emitter = AlertEmitter(channel=channel)

        assert emitter.maybe_alert(10, 3, False, 10.0) is False
        channel.play.assert_not_called()
        assert emitter.last_fired is None

    def test_alert_logs_and_plays(self) -> None:
        """A fired alert adds an ALERT entry and plays the channel."""
        log = EventLog()
        channel = Mock()
        emitter = AlertEmitter(log, channel)

        emitter.maybe_alert(4, 3, True, 1.0)

        channel.play.assert_called_once()
        assert log.entries[0].severity is Severity.ALERT
        assert "4 people" in log.entries[0].message

    def test_channel_failure_is_swallowed(self) -> None:
        """Playback errors never propagate to the detection loop."""
        channel = Mock()
        channel.play.side_effect = OSError("no device")
        emitter = AlertEmitter(channel=channel)

        assert emitter.maybe_alert(5, 3, True, 1.0) is True


class TestTwoToneAlertChannel:
    """Tests for the audible alert waveform and playback gating."""

    def test_waveform_shape_and_gain(self) -> None:
        """The tone lasts half a second and decays from its initial gain."""
        samples = synthesize_two_tone(8000)

        assert samples.dtype == np.float32
        assert len(samples) == 4000
        assert np.max(np.abs(samples[:100])) <= 0.05 + 1e-6
        assert np.max(np.abs(samples[-100:])) < 0.002

    @patch("occupancy_watch.pipeline.alerts.PYAUDIO_AVAILABLE", False)
    @patch("occupancy_watch.pipeline.alerts.threading.Thread")
    def test_play_skipped_without_backend(self, mock_thread: Mock) -> None:
        """No playback thread is started when pyaudio is missing."""
        TwoToneAlertChannel(sample_rate=8000).play()

        mock_thread.assert_not_called()
