"""Bounded, newest-first event history mirrored to loguru."""

from __future__ import annotations

import threading
import time
import uuid
from collections import deque
from datetime import datetime
from typing import TYPE_CHECKING

from loguru import logger

from occupancy_watch.pipeline.types import LogEntry, Severity


if TYPE_CHECKING:
    from collections.abc import Callable


MAX_LOG_ENTRIES = 100

_LOGURU_LEVELS = {
    Severity.INFO: "INFO",
    Severity.ALERT: "WARNING",
    Severity.SUCCESS: "SUCCESS",
    Severity.WARNING: "WARNING",
    Severity.ERROR: "ERROR",
}


def new_entry_id() -> str:
    """Return a short random identifier for log entries and captures."""
    return uuid.uuid4().hex[:9]


def format_clock_time(timestamp: float) -> str:
    """Format an epoch timestamp as local ``HH:MM:SS``."""
    return datetime.fromtimestamp(timestamp).strftime("%H:%M:%S")


class EventLog:
    """Append-only event history capped at ``capacity`` entries."""

    def __init__(
        self,
        capacity: int = MAX_LOG_ENTRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Create an empty history."""
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._clock = clock
        self._lock = threading.Lock()

    def add(self, message: str, severity: Severity = Severity.INFO) -> LogEntry:
        """Record an event; the oldest entry is dropped once full."""
        entry = LogEntry(
            id=new_entry_id(),
            time=format_clock_time(self._clock()),
            message=message,
            severity=severity,
        )
        with self._lock:
            self._entries.appendleft(entry)
        logger.opt(depth=1).log(
            _LOGURU_LEVELS[severity], "[{}] {}", severity.value, message
        )
        return entry

    @property
    def entries(self) -> list[LogEntry]:
        """Return entries ordered newest first."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        """Return the number of stored entries."""
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Drop all stored entries."""
        with self._lock:
            self._entries.clear()
