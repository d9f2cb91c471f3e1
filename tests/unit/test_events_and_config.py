"""Unit tests for the event log and session configuration."""

from __future__ import annotations

import pytest

from occupancy_watch.pipeline.config import MonitorConfig
from occupancy_watch.pipeline.events import (
    MAX_LOG_ENTRIES,
    EventLog,
    format_clock_time,
    new_entry_id,
)
from occupancy_watch.pipeline.types import ProcessingMode, Severity


class TestEventLog:
    """Tests for the bounded newest-first event history."""

    def test_entries_newest_first(self) -> None:
        """The latest entry is returned first."""
        log = EventLog()
        log.add("first")
        log.add("second", Severity.SUCCESS)

        assert [e.message for e in log.entries] == ["second", "first"]
        assert log.entries[0].severity is Severity.SUCCESS

    def test_capacity_drops_oldest(self) -> None:
        """Adding past capacity evicts the oldest entry."""
        log = EventLog()
        for i in range(1, MAX_LOG_ENTRIES + 2):
            log.add(f"event {i}")

        entries = log.entries
        assert len(entries) == MAX_LOG_ENTRIES
        assert entries[0].message == f"event {MAX_LOG_ENTRIES + 1}"
        assert entries[-1].message == "event 2"

    def test_entry_time_uses_clock(self) -> None:
        """Entry timestamps come from the injected clock."""
        log = EventLog(clock=lambda: 3600.0)

        entry = log.add("hello")

        assert entry.time == format_clock_time(3600.0)

    def test_ids_are_unique(self) -> None:
        """Entries receive distinct identifiers."""
        ids = {new_entry_id() for _ in range(50)}

        assert len(ids) == 50
        assert all(len(i) == 9 for i in ids)

    def test_clear(self) -> None:
        """Clearing drops every entry."""
        log = EventLog()
        log.add("x")
        log.clear()

        assert len(log) == 0


class TestMonitorConfig:
    """Tests for MonitorConfig validation."""

    def test_defaults(self) -> None:
        """Defaults match the documented behaviour."""
        config = MonitorConfig()

        assert config.alert_threshold == 3
        assert config.confidence == 0.5
        assert config.mode is ProcessingMode.NORMAL
        assert config.sound_enabled is True
        assert config.target_label == "person"
        assert config.reset_stats_on_start is False

    @pytest.mark.parametrize(
        ("mode", "delay"),
        [("fast", 0.030), ("normal", 0.100), ("accurate", 0.250)],
    )
    def test_mode_delay(self, mode: str, delay: float) -> None:
        """String modes are normalized and map to cycle delays."""
        config = MonitorConfig(mode=mode)

        assert config.cycle_delay_s == pytest.approx(delay)

    @pytest.mark.parametrize("threshold", [0, -2])
    def test_threshold_must_be_positive(self, threshold: int) -> None:
        """Thresholds below one are rejected."""
        with pytest.raises(ValueError, match="alert_threshold"):
            MonitorConfig(alert_threshold=threshold)

    def test_threshold_must_be_integer(self) -> None:
        """Non-integer thresholds are rejected."""
        with pytest.raises(TypeError):
            MonitorConfig(alert_threshold=2.5)

    @pytest.mark.parametrize("confidence", [0.0, 1.0, 1.5])
    def test_confidence_open_interval(self, confidence: float) -> None:
        """Confidence must lie strictly between zero and one."""
        with pytest.raises(ValueError, match="confidence"):
            MonitorConfig(confidence=confidence)

    def test_unknown_mode(self) -> None:
        """Unknown mode names are rejected."""
        with pytest.raises(ValueError):
            MonitorConfig(mode="turbo")

    def test_empty_label(self) -> None:
        """An empty target label is rejected."""
        with pytest.raises(ValueError, match="target_label"):
            MonitorConfig(target_label="")
