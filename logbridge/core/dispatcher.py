"""
Delivery of entries to the drivers whose rules match them.
"""

import logging
from typing import Callable, Iterable, Optional

from logbridge.core.registry import DriverRegistration
from logbridge.core.rules import matches_rules
from logbridge.data.sources.base import LogEntry
from logbridge.exceptions import DriverDeliveryError

logger = logging.getLogger(__name__)

ErrorHook = Callable[[Exception], None]


def report_error(hook: Optional[ErrorHook], error: Exception) -> None:
    """Pass an error to the host's hook. A failing hook is logged, never raised."""
    if hook is None:
        return
    try:
        hook(error)
    except Exception:
        logger.exception("Error hook failed while handling %r", error)


class Dispatcher:

    def __init__(self, on_error: Optional[ErrorHook] = None):
        self.on_error = on_error

    def dispatch(self, entry: LogEntry, snapshot: Iterable[DriverRegistration]) -> int:
        """
        Deliver `entry` to every enabled registration whose rules match it.

        Returns the number of drivers that received the entry without raising.
        """
        delivered = 0
        for registration in snapshot:
            if not registration.enabled:
                continue
            if not matches_rules(registration.rules, entry.subsystem, entry.category):
                continue
            try:
                registration.driver.receive(entry.level, entry.category, entry.date, entry.message)
            except Exception as e:
                logger.warning("Driver %s failed on entry %s: %s", registration.driver_id, entry.position, e,
                               exc_info=True)
                error = DriverDeliveryError(registration.driver_id, entry)
                error.__cause__ = e
                report_error(self.on_error, error)
            else:
                delivered += 1
        return delivered
