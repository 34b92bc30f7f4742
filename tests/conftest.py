from datetime import datetime, timezone

import pytest

from logbridge.core.log_watcher import Watcher
from logbridge.data.sources.base import LogEntry, LogLevel, LogSource, Position
from logbridge.data.sources.memory.memory_source import MemorySource
from logbridge.drivers.memory_driver import MemoryDriver
from logbridge.exceptions import SourceUnavailableError


def make_entry(seq, subsystem="com.app", category="", message=None, level=LogLevel.INFO):
    return LogEntry(
        level=level,
        date=datetime.fromtimestamp(1_700_000_000 + seq, tz=timezone.utc),
        subsystem=subsystem,
        category=category,
        message=message if message is not None else f"entry {seq}",
        position=Position(seq, seq),
    )


class ScriptedSource(LogSource):
    """
    Returns prepared batches, one per fetch. A batch item that is an
    exception instance is raised at that point of the iteration.
    """

    def __init__(self, *batches):
        self.batches = list(batches)
        self.calls = []

    def fetch_since(self, position):
        self.calls.append(position)
        batch = self.batches.pop(0) if self.batches else []
        if isinstance(batch, Exception):
            raise batch
        return self._iterate(batch)

    def _iterate(self, batch):
        for item in batch:
            if isinstance(item, Exception):
                raise item
            yield item


class FailingDriver:
    def __init__(self, id="broken"):
        self.id = id
        self.calls = 0

    def receive(self, level, category, date, message):
        self.calls += 1
        raise RuntimeError("driver exploded")


@pytest.fixture
def source():
    return MemorySource()


@pytest.fixture
def driver():
    return MemoryDriver("memory")


@pytest.fixture
def errors():
    return []


@pytest.fixture
def watcher(source, errors):
    w = Watcher(source, interval=1, on_error=errors.append)
    yield w
    w.stop(wait=True, timeout=5)


@pytest.fixture
def unavailable():
    return SourceUnavailableError("journal offline")
