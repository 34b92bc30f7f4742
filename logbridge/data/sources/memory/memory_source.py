import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from ..base import LogSource, LogEntry, LogLevel, Position, TimePeriod
from logbridge.exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)


def _to_microseconds(date):
    return int(date.timestamp() * 1_000_000)


class MemorySource(LogSource):
    """
    In-process log store.

    Entries get strictly increasing positions in append order. Hosts use it
    to feed the bridge from their own code; tests use it to script cycles,
    including outages via `fail_next()` or `available`.
    """

    def __init__(self, time_period: TimePeriod = TimePeriod.ALL, custom_start_time: float = None):
        self.time_period = time_period
        self.custom_start_time = custom_start_time
        self.available = True

        self._entries: list[LogEntry] = []
        self._sequence = 0
        self._failures = 0
        self._lock = threading.Lock()
        self._opened_at = datetime.now(timezone.utc)

    def append(self, message, *, subsystem="", category="", level=LogLevel.INFO, date=None) -> LogEntry:
        date = date or datetime.now(timezone.utc)
        with self._lock:
            self._sequence += 1
            position = Position(_to_microseconds(date), self._sequence, token=str(self._sequence))
            entry = LogEntry(level, date, subsystem, category, message, position)
            self._entries.append(entry)
        return entry

    def fail_next(self, count=1):
        """Make the next `count` fetches raise SourceUnavailableError."""
        with self._lock:
            self._failures += count

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def _start_bound(self) -> Optional[int]:
        if self.time_period == TimePeriod.NOW:
            return _to_microseconds(self._opened_at)
        if self.time_period == TimePeriod.CUSTOM and self.custom_start_time:
            return int(self.custom_start_time * 1_000_000)
        return None

    def fetch_since(self, position):
        with self._lock:
            if not self.available:
                raise SourceUnavailableError("memory source is marked unavailable")
            if self._failures:
                self._failures -= 1
                raise SourceUnavailableError("simulated source failure")
            entries = list(self._entries)

        if position is not None:
            selected = [e for e in entries if e.position > position]
        else:
            bound = self._start_bound()
            selected = entries if bound is None else [e for e in entries if e.position.timestamp_us >= bound]

        logger.debug("Memory source returning %d of %d entries", len(selected), len(entries))
        return iter(selected)
