"""
Registry of drivers and their source rules.

Registrations are immutable; every mutation swaps in a replaced copy under
the lock, so `snapshot()` can hand the polling thread a plain tuple that no
later mutation can change.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Iterable, Tuple

from logbridge.core.rules import SourceRule
from logbridge.drivers.base import LogDriver
from logbridge.exceptions import DuplicateDriverError, UnknownDriverError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriverRegistration:
    driver_id: str
    driver: Any
    rules: Tuple[SourceRule, ...] = ()
    enabled: bool = True


class DriverRegistry:

    def __init__(self):
        self._lock = threading.Lock()
        self._registrations: dict[str, DriverRegistration] = {}

    def register(self, driver_id: str, driver: LogDriver, rules: Iterable[SourceRule] = ()) -> DriverRegistration:
        if not isinstance(driver, LogDriver) or not callable(getattr(driver, "receive", None)):
            raise TypeError(f"driver {driver_id!r} has no receive() method")
        registration = DriverRegistration(driver_id, driver, tuple(rules))
        with self._lock:
            if driver_id in self._registrations:
                raise DuplicateDriverError(driver_id)
            self._registrations[driver_id] = registration
        logger.info("Registered driver %s with %d rule(s)", driver_id, len(registration.rules))
        return registration

    def deregister(self, driver_id: str) -> DriverRegistration:
        with self._lock:
            try:
                registration = self._registrations.pop(driver_id)
            except KeyError:
                raise UnknownDriverError(driver_id) from None
        logger.info("Deregistered driver %s", driver_id)
        return registration

    def get(self, driver_id: str) -> DriverRegistration:
        with self._lock:
            return self._lookup(driver_id)

    def set_enabled(self, driver_id: str, enabled: bool) -> None:
        self._update(driver_id, lambda reg: replace(reg, enabled=bool(enabled)))
        logger.info("Driver %s %s", driver_id, "enabled" if enabled else "disabled")

    def add_rules(self, driver_id: str, rules: Iterable[SourceRule]) -> None:
        new_rules = tuple(rules)

        def _add(reg):
            merged = list(reg.rules)
            for rule in new_rules:
                if rule not in merged:
                    merged.append(rule)
            return replace(reg, rules=tuple(merged))

        self._update(driver_id, _add)

    def remove_rules(self, driver_id: str, rules: Iterable[SourceRule]) -> None:
        dropped = set(rules)
        self._update(driver_id, lambda reg: replace(reg, rules=tuple(r for r in reg.rules if r not in dropped)))

    def snapshot(self) -> Tuple[DriverRegistration, ...]:
        with self._lock:
            return tuple(self._registrations.values())

    def __contains__(self, driver_id):
        with self._lock:
            return driver_id in self._registrations

    def __len__(self):
        with self._lock:
            return len(self._registrations)

    def _lookup(self, driver_id):
        try:
            return self._registrations[driver_id]
        except KeyError:
            raise UnknownDriverError(driver_id) from None

    def _update(self, driver_id, change):
        with self._lock:
            self._registrations[driver_id] = change(self._lookup(driver_id))
