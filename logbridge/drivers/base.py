"""
Driver contract.

A driver is any object with a `receive` method. Drivers may also expose an
`id` and a sequence of `rules`, which `LogClient.register_driver` uses when
the caller does not pass them explicitly.
"""
from datetime import datetime
from typing import Protocol, runtime_checkable

from logbridge.data.sources.base import LogLevel


@runtime_checkable
class LogDriver(Protocol):

    def receive(self, level: LogLevel, category: str, date: datetime, message: str) -> None:
        """
        Handle one delivered entry.

        Called on the polling thread, in position order. Should return
        promptly; a slow driver delays every other driver.
        """
        ...
