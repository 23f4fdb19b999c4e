"""Runtime configuration for the swap lifecycle service.

Pure configuration data: no Temporal client is created here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import final

TASK_QUEUE_LIFECYCLE: str = "irswap-lifecycle"


@final
@dataclass(frozen=True, slots=True)
class TemporalConfig:
    """Where the worker connects and which task queue it serves."""

    target_host: str = "localhost:7233"
    namespace: str = "default"
    task_queue: str = TASK_QUEUE_LIFECYCLE

    def __post_init__(self) -> None:
        if not self.target_host:
            raise TypeError("TemporalConfig.target_host must be non-empty")
        if not self.task_queue:
            raise TypeError("TemporalConfig.task_queue must be non-empty")


@final
@dataclass(frozen=True, slots=True)
class LiquidationMonitorConfig:
    """How often the lifecycle workflow checks a swap for margin breach."""

    poll_interval: timedelta = timedelta(hours=1)
    activity_timeout: timedelta = timedelta(seconds=30)
    max_attempts: int = 3

    def __post_init__(self) -> None:
        if self.poll_interval <= timedelta(0):
            raise TypeError(
                f"LiquidationMonitorConfig.poll_interval must be > 0, got {self.poll_interval}"
            )
        if self.activity_timeout <= timedelta(0):
            raise TypeError(
                "LiquidationMonitorConfig.activity_timeout must be > 0, "
                f"got {self.activity_timeout}"
            )
        if self.max_attempts < 1:
            raise TypeError(
                f"LiquidationMonitorConfig.max_attempts must be >= 1, got {self.max_attempts}"
            )


DEFAULT_TEMPORAL_CONFIG = TemporalConfig()
DEFAULT_MONITOR_CONFIG = LiquidationMonitorConfig()
