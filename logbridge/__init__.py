"""
logbridge: polls a system log store and forwards new entries to drivers.

    from logbridge import LogClient, MemoryDriver, SubsystemAndCategories
    from logbridge.data.sources_interface import create_source

    client = LogClient(create_source("systemd"))
    client.register_driver(MemoryDriver("ui"), [SubsystemAndCategories("com.app", {"ui"})])
    client.start()
"""

__version__ = "0.1.0"

from .config import BridgeConfig, CustomInterval, PollingInterval, MIN_INTERVAL_SECONDS
from .core.client import LogClient
from .core.cursor import CursorStore, CursorTracker
from .core.dispatcher import Dispatcher
from .core.log_watcher import PollingState, Watcher
from .core.registry import DriverRegistration, DriverRegistry
from .core.rules import AnySubsystem, SourceRule, SubsystemAndCategories, matches_rules
from .data.sources.base import LogEntry, LogLevel, LogSource, Position, TimePeriod
from .drivers.base import LogDriver
from .drivers.callback_driver import CallbackDriver
from .drivers.file_driver import JsonlFileDriver
from .drivers.logging_driver import LoggingDriver
from .drivers.memory_driver import DeliveredEntry, MemoryDriver
from .exceptions import (
    AlreadyRunningError,
    DriverDeliveryError,
    DuplicateDriverError,
    InvalidIntervalError,
    InvalidStateError,
    LogBridgeError,
    OutOfOrderError,
    SourceUnavailableError,
    UnknownDriverError,
)

__all__ = [
    "__version__",
    "BridgeConfig", "CustomInterval", "PollingInterval", "MIN_INTERVAL_SECONDS",
    "LogClient",
    "CursorStore", "CursorTracker",
    "Dispatcher",
    "PollingState", "Watcher",
    "DriverRegistration", "DriverRegistry",
    "AnySubsystem", "SourceRule", "SubsystemAndCategories", "matches_rules",
    "LogEntry", "LogLevel", "LogSource", "Position", "TimePeriod",
    "LogDriver", "CallbackDriver", "JsonlFileDriver", "LoggingDriver", "DeliveredEntry", "MemoryDriver",
    "AlreadyRunningError", "DriverDeliveryError", "DuplicateDriverError", "InvalidIntervalError",
    "InvalidStateError", "LogBridgeError", "OutOfOrderError", "SourceUnavailableError", "UnknownDriverError",
]
