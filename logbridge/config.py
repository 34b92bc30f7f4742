"""
Polling configuration.
"""

import math
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from logbridge.data.sources.base import TimePeriod
from logbridge.exceptions import InvalidIntervalError

MIN_INTERVAL_SECONDS = 1.0
# Longest wait a threading.Condition accepts on this platform
MAX_INTERVAL_SECONDS = threading.TIMEOUT_MAX


class PollingInterval(Enum):
    SHORT = 10.0
    MEDIUM = 30.0
    LONG = 60.0


@dataclass(frozen=True)
class CustomInterval:
    seconds: float


IntervalLike = Union[PollingInterval, CustomInterval, timedelta, int, float]


def resolve_interval(interval: IntervalLike) -> float:
    """
    Resolve any accepted interval form to seconds.

    Values outside MIN_INTERVAL_SECONDS..MAX_INTERVAL_SECONDS are rejected
    rather than clamped.
    """
    if isinstance(interval, PollingInterval):
        seconds = interval.value
    elif isinstance(interval, CustomInterval):
        seconds = interval.seconds
    elif isinstance(interval, timedelta):
        seconds = interval.total_seconds()
    elif isinstance(interval, (int, float)) and not isinstance(interval, bool):
        seconds = float(interval)
    else:
        raise InvalidIntervalError(interval, "unsupported polling interval type")

    if not math.isfinite(seconds) or seconds < MIN_INTERVAL_SECONDS:
        raise InvalidIntervalError(interval)
    if seconds > MAX_INTERVAL_SECONDS:
        raise InvalidIntervalError(interval, f"polling interval must be at most {MAX_INTERVAL_SECONDS:.0f} seconds")
    return float(seconds)


def default_cursor_dir() -> Path:
    return Path("~/.local/share/logbridge/cursors").expanduser()


@dataclass
class BridgeConfig:
    interval: IntervalLike = PollingInterval.MEDIUM
    fire_immediately: bool = True
    source: str = "systemd"
    time_period: TimePeriod = TimePeriod.NOW
    custom_start_time: Optional[float] = None
    cursor_dir: Path = field(default_factory=default_cursor_dir)
    cursor_file: Optional[Path] = None
    persist_every_cycle: bool = False

    @property
    def cursor_path(self) -> Path:
        if self.cursor_file is not None:
            return Path(self.cursor_file).expanduser()
        return self.cursor_dir / f"{self.source}_cursor.json"

    def source_options(self) -> dict:
        return {"time_period": self.time_period, "custom_start_time": self.custom_start_time}
