import threading
from datetime import datetime
from typing import NamedTuple

from logbridge.data.sources.base import LogLevel


class DeliveredEntry(NamedTuple):
    level: LogLevel
    category: str
    date: datetime
    message: str


class MemoryDriver:
    """
    Keeps delivered entries in a list.

    Safe to read from another thread while the poller delivers; `wait_for`
    blocks until a number of entries has arrived.
    """

    def __init__(self, id, rules=()):
        self.id = id
        self.rules = list(rules)
        self._entries: list[DeliveredEntry] = []
        self._cond = threading.Condition()

    def receive(self, level, category, date, message):
        with self._cond:
            self._entries.append(DeliveredEntry(level, category, date, message))
            self._cond.notify_all()

    @property
    def entries(self) -> list[DeliveredEntry]:
        with self._cond:
            return list(self._entries)

    @property
    def messages(self) -> list[str]:
        return [entry.message for entry in self.entries]

    def wait_for(self, count, timeout=None) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: len(self._entries) >= count, timeout)

    def clear(self):
        with self._cond:
            self._entries.clear()
