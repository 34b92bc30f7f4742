"""
Host-facing control surface.

The host constructs one LogClient per process and passes it to whatever needs
to register drivers or control polling. Nothing here is a module-level
singleton.
"""

import logging
import threading
from typing import Iterable, Optional

from logbridge.config import BridgeConfig
from logbridge.core.cursor import CursorStore, CursorTracker
from logbridge.core.dispatcher import ErrorHook, report_error
from logbridge.core.log_watcher import PollingState, Watcher
from logbridge.core.registry import DriverRegistry
from logbridge.core.rules import SourceRule
from logbridge.data.sources.base import LogSource, Position
from logbridge.data.sources_interface import create_source

logger = logging.getLogger(__name__)


class LogClient:

    def __init__(self, source: LogSource, config: BridgeConfig = None, *,
                 on_error: Optional[ErrorHook] = None, cursor_store: Optional[CursorStore] = None):
        self.config = config or BridgeConfig()
        self.source = source
        self.cursor_store = cursor_store
        self._save_lock = threading.Lock()
        self.registry = DriverRegistry()
        self.cursor = CursorTracker(cursor_store.load() if cursor_store is not None else None)
        self.watcher = Watcher(
            source,
            self.registry,
            self.cursor,
            interval=self.config.interval,
            fire_immediately=self.config.fire_immediately,
            on_error=on_error,
        )
        self._install_commit_hook()

    @classmethod
    def from_config(cls, config: BridgeConfig, *, on_error: Optional[ErrorHook] = None, persist_cursor: bool = True):
        """Build the configured source and, if asked, a cursor store at config.cursor_path."""
        source = create_source(config.source, **config.source_options())
        store = CursorStore(config.cursor_path) if persist_cursor else None
        return cls(source, config, on_error=on_error, cursor_store=store)

    # ===== Polling control =====

    @property
    def state(self) -> PollingState:
        return self.watcher.state

    def configure(self, interval) -> float:
        return self.watcher.configure(interval)

    def start(self, interval=None) -> None:
        self.watcher.start(interval)
        self._install_commit_hook()

    def pause(self) -> None:
        self.watcher.pause()

    def resume(self) -> None:
        self.watcher.resume()

    def stop(self, wait: bool = True, timeout: Optional[float] = None) -> bool:
        """
        Stop polling and save the cursor. Returns True when the worker exited.

        If the worker is still finishing a cycle when `timeout` runs out, that
        cycle saves the cursor itself when it commits.
        """
        exited = self.watcher.stop(wait=wait, timeout=timeout)
        if not exited and self.cursor_store is not None:
            self.watcher.after_commit = self._save_cursor
        self._save_cursor()
        return exited

    def poll_once(self) -> int:
        return self.watcher.poll_once()

    def reset_cursor(self) -> None:
        self.cursor.reset()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        self.source.close()

    # ===== Drivers =====

    def register_driver(self, driver, rules: Optional[Iterable[SourceRule]] = None,
                        driver_id: Optional[str] = None) -> str:
        """
        Register a driver and return its id.

        `driver_id` and `rules` fall back to the driver's own `id` and `rules`
        attributes when not given.
        """
        driver_id = driver_id if driver_id is not None else getattr(driver, "id", None)
        if not driver_id:
            raise TypeError("driver has no id; pass driver_id explicitly")
        if rules is None:
            rules = getattr(driver, "rules", None) or ()
        self.registry.register(driver_id, driver, rules)
        return driver_id

    def deregister_driver(self, driver_id: str) -> None:
        self.registry.deregister(driver_id)

    def set_driver_enabled(self, driver_id: str, enabled: bool) -> None:
        self.registry.set_enabled(driver_id, enabled)

    def add_source_rules(self, driver_id: str, rules: Iterable[SourceRule]) -> None:
        self.registry.add_rules(driver_id, rules)

    def remove_source_rules(self, driver_id: str, rules: Iterable[SourceRule]) -> None:
        self.registry.remove_rules(driver_id, rules)

    # ===== Cursor persistence =====

    def _install_commit_hook(self) -> None:
        persist = self.cursor_store is not None and self.config.persist_every_cycle
        self.watcher.after_commit = self._save_cursor if persist else None

    def _save_cursor(self, committed: Optional[Position] = None) -> None:
        # Writes the tracker's latest position, never `committed`; the file
        # only moves forward even when the worker and stop() both save.
        if self.cursor_store is None:
            return
        with self._save_lock:
            position = self.cursor.current()
            if position is None:
                return
            try:
                self.cursor_store.save(position)
            except OSError as e:
                logger.warning("Failed to save cursor: %s", e)
                report_error(self.watcher.on_error, e)
