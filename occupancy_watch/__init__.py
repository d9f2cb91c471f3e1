"""Occupancy Watch: real-time people counting over camera and video feeds."""

from occupancy_watch.pipeline import (
    MonitorConfig,
    MonitorSession,
    SessionState,
    SourceKind,
    configure_logging,
)


__all__ = [
    "MonitorConfig",
    "MonitorSession",
    "SessionState",
    "SourceKind",
    "configure_logging",
]
