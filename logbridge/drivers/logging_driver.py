import logging

from logbridge.data.sources.base import LogLevel

LEVEL_MAP = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FAULT: logging.CRITICAL,
}


class LoggingDriver:
    """Re-emits entries through a standard library logger."""

    def __init__(self, id, logger=None, rules=()):
        self.id = id
        self.logger = logger or logging.getLogger("logbridge.entries")
        self.rules = list(rules)

    def receive(self, level, category, date, message):
        self.logger.log(
            LEVEL_MAP.get(level, logging.INFO),
            "%s [%s] %s",
            date.isoformat(),
            category or "-",
            message,
        )
