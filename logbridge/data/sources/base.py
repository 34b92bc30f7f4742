#!/usr/bin/env python3
"""
Base classes and contracts for log sources.

All log sources must:
1. Inherit from LogSource
2. Yield LogEntry instances, oldest first, strictly after the given position
3. Raise SourceUnavailableError when the underlying store cannot be read
"""

from dataclasses import dataclass, field
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from functools import total_ordering
from typing import Iterator, Optional


class LogLevel(Enum):
    DEBUG = 1
    INFO = 2
    NOTICE = 3
    ERROR = 4
    FAULT = 5


class TimePeriod(Enum):
    """Where a source starts reading when no cursor has been committed yet."""
    ALL = "all"
    BOOT = "boot"
    NOW = "now"
    CUSTOM = "custom"


@total_ordering
@dataclass(frozen=True)
class Position:
    """
    Totally ordered read position.

    Positions from the same sequence space (`epoch`, the journal's seqnum_id)
    order by sequence number, which is the order the store wrote them in and
    is immune to wall clock steps. Positions from different spaces fall back
    to timestamp order. The token is the source's native cursor, kept so the
    source can seek back to the exact record; it takes no part in ordering.
    """
    timestamp_us: int
    sequence: int = 0
    token: Optional[str] = field(default=None, compare=False)
    epoch: Optional[str] = field(default=None, compare=False)

    def _sort_key(self, same_epoch):
        if same_epoch:
            return (self.sequence, self.timestamp_us)
        return (self.timestamp_us, self.sequence)

    def __lt__(self, other):
        if not isinstance(other, Position):
            return NotImplemented
        same_epoch = self.epoch == other.epoch
        return self._sort_key(same_epoch) < other._sort_key(same_epoch)

    def __str__(self):
        return f"{self.timestamp_us}:{self.sequence}"


@dataclass(frozen=True)
class LogEntry:
    """
    A normalized log entry.
    """
    level: LogLevel
    date: datetime
    subsystem: str        # e.g. 'com.app', 'NetworkManager'; may be empty
    category: str         # may be empty
    message: str          # final text, redaction already applied by the store
    position: Position


class LogSource(ABC):
    """
    Base class for log sources.
    """

    @abstractmethod
    def fetch_since(self, position: Optional[Position]) -> Iterator[LogEntry]:
        """
        - Returns a lazy iterator of entries after `position`, oldest first.
        - `None` means nothing was read yet; start per the source's TimePeriod.
        - Must be finite and safe to call again with the same position.
        """
        pass

    def close(self):
        """
        - release handles held between fetches (optional)
        """
        pass
