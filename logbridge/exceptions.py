"""
Error taxonomy for the log bridge.

Configuration and lifecycle errors are raised synchronously to the caller.
Source and delivery errors are raised inside the polling worker and are
reported through the error hook instead of propagating.
"""


class LogBridgeError(Exception):
    pass


# Configuration errors

class InvalidIntervalError(LogBridgeError, ValueError):
    def __init__(self, value, reason="polling interval must be at least 1 second"):
        self.value = value
        super().__init__(f"{reason} (got {value!r})")


class DuplicateDriverError(LogBridgeError):
    def __init__(self, driver_id):
        self.driver_id = driver_id
        super().__init__(f"driver {driver_id!r} is already registered")


class UnknownDriverError(LogBridgeError, KeyError):
    def __init__(self, driver_id):
        self.driver_id = driver_id
        super().__init__(f"driver {driver_id!r} is not registered")

    def __str__(self):
        return self.args[0]


# Lifecycle errors

class InvalidStateError(LogBridgeError):
    def __init__(self, state, operation):
        self.state = state
        self.operation = operation
        super().__init__(f"cannot {operation} while {state.name.lower()}")


class AlreadyRunningError(InvalidStateError):
    def __init__(self, state):
        super().__init__(state, "start")


# Runtime errors

class SourceUnavailableError(LogBridgeError):
    """The log store could not be queried. The next cycle retries."""


class DriverDeliveryError(LogBridgeError):
    def __init__(self, driver_id, entry):
        self.driver_id = driver_id
        self.entry = entry
        super().__init__(f"driver {driver_id!r} failed to receive entry at {entry.position}")


class OutOfOrderError(LogBridgeError):
    """Cursor regression. Indicates a bug in a source, never a recoverable condition."""

    def __init__(self, current, attempted):
        self.current = current
        self.attempted = attempted
        super().__init__(f"position {attempted} is before current position {current}")
