"""Runtime configuration for a monitoring session."""

from __future__ import annotations

from dataclasses import dataclass

from occupancy_watch.pipeline.types import ProcessingMode


DEFAULT_TARGET_LABEL = "person"


@dataclass(frozen=True)
class MonitorConfig:
    """Caller-supplied settings read by the detection loop on every cycle."""

    alert_threshold: int = 3
    confidence: float = 0.5
    mode: ProcessingMode = ProcessingMode.NORMAL
    sound_enabled: bool = True
    target_label: str = DEFAULT_TARGET_LABEL
    reset_stats_on_start: bool = False

    def __post_init__(self) -> None:
        """Validate value ranges and normalize the processing mode."""
        if isinstance(self.mode, str):
            object.__setattr__(self, "mode", ProcessingMode(self.mode))
        if isinstance(self.alert_threshold, bool) or not isinstance(
            self.alert_threshold, int
        ):
            message = f"alert_threshold must be an integer, got {self.alert_threshold!r}"
            raise TypeError(message)
        if self.alert_threshold < 1:
            message = f"alert_threshold must be >= 1, got {self.alert_threshold}"
            raise ValueError(message)
        if not 0.0 < float(self.confidence) < 1.0:
            message = f"confidence must be within (0, 1), got {self.confidence}"
            raise ValueError(message)
        if not self.target_label:
            message = "target_label must not be empty"
            raise ValueError(message)

    @property
    def cycle_delay_s(self) -> float:
        """Return the pause between detection cycles for the selected mode."""
        return self.mode.delay_s
