import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

from logbridge.config import PollingInterval, resolve_interval
from logbridge.core.cursor import CursorTracker
from logbridge.core.dispatcher import Dispatcher, ErrorHook, report_error
from logbridge.core.registry import DriverRegistry
from logbridge.data.sources.base import LogSource, Position
from logbridge.exceptions import (
    AlreadyRunningError,
    InvalidStateError,
    OutOfOrderError,
    SourceUnavailableError,
)

"""
This module is the polling engine of the bridge.
A single background thread waits out the interval, reads new entries from the
source, hands them to the dispatcher and commits the cursor.
"""

logger = logging.getLogger(__name__)

MAX_WAIT_SLICE = 3600.0


class PollingState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"    # halted by a fatal error; stop() returns to IDLE


class Watcher:
    """
    Polling scheduler.

    Cycles never overlap: the worker and `poll_once()` share one cycle lock,
    and a cycle that overruns the interval pushes the next tick back. The
    inter-cycle wait is a condition wait, so stop/pause/resume/configure
    wake the worker immediately.
    """

    def __init__(self, source: LogSource, registry: DriverRegistry = None, cursor: CursorTracker = None,
                 *, interval=PollingInterval.MEDIUM, fire_immediately: bool = True,
                 on_error: Optional[ErrorHook] = None):
        self.source = source
        self.registry = registry if registry is not None else DriverRegistry()
        self.cursor = cursor if cursor is not None else CursorTracker()
        if self.cursor.reset_guard is None:
            self.cursor.reset_guard = self._require_idle
        self.dispatcher = Dispatcher(on_error)
        self.fire_immediately = fire_immediately
        self.after_commit: Optional[Callable[[Position], None]] = None

        self._interval = resolve_interval(interval)
        self._on_error = on_error
        self._state = PollingState.IDLE
        self._cond = threading.Condition()
        self._cycle_lock = threading.Lock()
        self._generation = 0
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> PollingState:
        with self._cond:
            return self._state

    @property
    def interval(self) -> float:
        with self._cond:
            return self._interval

    @property
    def on_error(self) -> Optional[ErrorHook]:
        return self._on_error

    # ===== Lifecycle =====

    def configure(self, interval) -> float:
        seconds = resolve_interval(interval)
        with self._cond:
            self._interval = seconds
            self._cond.notify_all()
        logger.info("Polling interval set to %.1fs", seconds)
        return seconds

    def start(self, interval=None) -> None:
        seconds = resolve_interval(interval) if interval is not None else None
        with self._cond:
            if self._state in (PollingState.RUNNING, PollingState.PAUSED):
                raise AlreadyRunningError(self._state)
            if seconds is not None:
                self._interval = seconds
            self._state = PollingState.RUNNING
            self._generation += 1
            self._thread = threading.Thread(
                target=self._run,
                args=(self._generation,),
                name="logbridge-poller",
                daemon=True,
            )
            self._thread.start()
        logger.info("Polling started (interval=%.1fs)", self._interval)

    def pause(self) -> None:
        with self._cond:
            if self._state != PollingState.RUNNING:
                raise InvalidStateError(self._state, "pause")
            self._state = PollingState.PAUSED
            self._cond.notify_all()
        logger.info("Polling paused")

    def resume(self) -> None:
        with self._cond:
            if self._state != PollingState.PAUSED:
                raise InvalidStateError(self._state, "resume")
            self._state = PollingState.RUNNING
            self._cond.notify_all()
        logger.info("Polling resumed")

    def stop(self, wait: bool = False, timeout: Optional[float] = None) -> bool:
        """
        Return to IDLE from any state.

        A cycle already in progress finishes; no further cycle starts. With
        `wait`, block until the worker has exited or `timeout` runs out.
        Returns True when no worker is left running.
        """
        with self._cond:
            previous = self._state
            self._state = PollingState.IDLE
            self._generation += 1
            thread, self._thread = self._thread, None
            self._cond.notify_all()

        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        if previous != PollingState.IDLE:
            logger.info("Polling stopped (was %s)", previous.value)
        return thread is None or not thread.is_alive()

    def _require_idle(self, operation: str) -> None:
        with self._cond:
            if self._state != PollingState.IDLE:
                raise InvalidStateError(self._state, operation)

    # ===== Worker =====

    def _run(self, generation: int) -> None:
        last_end = None if self.fire_immediately else time.monotonic()
        try:
            while self._wait_for_tick(generation, last_end):
                self._run_cycle(generation)
                last_end = time.monotonic()
        except Exception as e:
            self._halt(generation, e)

    def _wait_for_tick(self, generation: int, last_end: Optional[float]) -> bool:
        with self._cond:
            while True:
                if self._generation != generation:
                    return False
                if self._state == PollingState.PAUSED:
                    self._cond.wait()
                    continue
                if self._state != PollingState.RUNNING:
                    return False
                if last_end is None:
                    return True
                remaining = last_end + self._interval - time.monotonic()
                if remaining <= 0:
                    return True
                # bounded slices; the loop re-checks the deadline on every wakeup
                self._cond.wait(min(remaining, MAX_WAIT_SLICE))

    def _run_cycle(self, generation: int) -> None:
        with self._cycle_lock:
            with self._cond:
                if self._generation != generation or self._state != PollingState.RUNNING:
                    return
            self._cycle()

    def _halt(self, generation: int, error: Exception) -> None:
        logger.error("Polling halted by unexpected error: %s", error, exc_info=error)
        with self._cond:
            if self._generation == generation:
                self._state = PollingState.STOPPED
                self._thread = None
        report_error(self._on_error, error)

    # ===== Cycle =====

    def poll_once(self) -> int:
        """Run one cycle on the calling thread. Returns the number of entries dispatched."""
        with self._cycle_lock:
            return self._cycle()

    def _cycle(self) -> int:
        since = self.cursor.current()
        committed = None
        count = 0
        entries = None
        try:
            entries = self.source.fetch_since(since)
            snapshot = self.registry.snapshot()
            last = since
            for entry in entries:
                if last is not None and entry.position < last:
                    raise OutOfOrderError(last, entry.position)
                self.dispatcher.dispatch(entry, snapshot)
                last = committed = entry.position
                count += 1
        except SourceUnavailableError as e:
            logger.warning("Log source unavailable, retrying from %s next cycle: %s", committed or since, e)
            report_error(self._on_error, e)
        finally:
            close = getattr(entries, "close", None)
            if close is not None:
                close()
            if committed is not None:
                self.cursor.advance(committed)

        if committed is not None and self.after_commit is not None:
            self.after_commit(committed)
        logger.debug("Cycle dispatched %d entries, cursor at %s", count, self.cursor.current())
        return count
