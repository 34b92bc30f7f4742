import logging
import time
from datetime import datetime, timezone

from ..base import LogSource, LogEntry, LogLevel, Position, TimePeriod
from logbridge.exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)


def _map_priority_to_level(priority):
    """Map syslog priority (0-7) to LogLevel."""
    if priority is None:
        return LogLevel.INFO
    priority = int(priority)
    if priority <= 2:
        return LogLevel.FAULT
    elif priority <= 4:
        return LogLevel.ERROR
    elif priority == 5:
        return LogLevel.NOTICE
    elif priority == 6:
        return LogLevel.INFO
    else:
        return LogLevel.DEBUG


def _parse_cursor(cursor):
    """Split a journal cursor ('s=..;i=..;b=..;m=..;t=..;x=..') into its fields."""
    fields = {}
    for part in (cursor or "").split(";"):
        key, sep, value = part.partition("=")
        if sep:
            fields[key] = value
    return fields


def _entry_position(entry):
    cursor = entry.get('__CURSOR')
    fields = _parse_cursor(cursor)
    try:
        timestamp_us = int(fields['t'], 16)
    except (KeyError, ValueError):
        realtime = entry.get('__REALTIME_TIMESTAMP')
        timestamp_us = int(realtime.timestamp() * 1_000_000) if realtime else 0
    try:
        sequence = int(fields['i'], 16)
    except (KeyError, ValueError):
        sequence = 0
    return Position(timestamp_us, sequence, token=cursor, epoch=fields.get('s'))


def _first_field(entry, names):
    for name in names:
        value = entry.get(name)
        if value:
            return value.decode('utf-8', errors='replace') if isinstance(value, bytes) else str(value)
    return ""


SUBSYSTEM_FIELDS = ('SYSLOG_IDENTIFIER', '_SYSTEMD_UNIT', '_COMM')
CATEGORY_FIELDS = ('CATEGORY',)


def _entry_to_log_entry(entry):
    """Convert a journal record to a LogEntry, or None for records without text."""
    msg = entry.get('MESSAGE')
    if not msg:
        return None

    if isinstance(msg, bytes):
        msg = msg.decode('utf-8', errors='replace')

    position = _entry_position(entry)
    date = entry.get('__REALTIME_TIMESTAMP')
    if not isinstance(date, datetime):
        date = datetime.fromtimestamp(position.timestamp_us / 1_000_000, tz=timezone.utc)

    return LogEntry(
        level=_map_priority_to_level(entry.get('PRIORITY')),
        date=date,
        subsystem=_first_field(entry, SUBSYSTEM_FIELDS),
        category=_first_field(entry, CATEGORY_FIELDS),
        message=str(msg),
        position=position,
    )


class JournalSource(LogSource):
    """
    Reads the systemd journal.

    Each fetch opens a fresh reader, so a fetch is restartable and a broken
    journal handle never outlives the cycle that hit it.
    """

    def __init__(self, time_period: TimePeriod = TimePeriod.NOW, custom_start_time: float = None,
                 journal_path: str = None, reader_factory=None):
        self.time_period = time_period
        self.custom_start_time = custom_start_time
        self.journal_path = journal_path
        self.reader_factory = reader_factory

        # Anchor for TimePeriod.NOW, fixed so that quiet cycles do not move it
        self.opened_at = time.time()

    def _open_reader(self):
        if self.reader_factory is not None:
            return self.reader_factory()
        from systemd import journal
        return journal.Reader(path=self.journal_path)

    def _seek(self, reader, position):
        """Position the reader at the cursor, or per time_period if there is none."""
        if position is not None:
            if position.token:
                reader.seek_cursor(position.token)
            else:
                reader.seek_realtime(position.timestamp_us / 1_000_000)
            return

        if self.time_period == TimePeriod.BOOT:
            reader.this_boot()
            reader.seek_head()
        elif self.time_period == TimePeriod.NOW:
            reader.seek_realtime(self.opened_at)
        elif self.time_period == TimePeriod.CUSTOM and self.custom_start_time:
            reader.seek_realtime(self.custom_start_time)
        else:
            reader.seek_head()

    def fetch_since(self, position):
        try:
            reader = self._open_reader()
        except OSError as e:
            raise SourceUnavailableError(f"cannot open journal: {e}") from e
        return self._read(reader, position)

    def _read(self, reader, position):
        try:
            try:
                self._seek(reader, position)
            except OSError as e:
                raise SourceUnavailableError(f"cannot seek journal: {e}") from e

            while True:
                try:
                    raw = reader.get_next()
                except OSError as e:
                    raise SourceUnavailableError(f"journal read failed: {e}") from e
                if not raw:
                    break

                entry = _entry_to_log_entry(raw)
                if entry is None:
                    continue
                # seek_cursor lands on the committed record itself; within one
                # seqnum space this compares by seqnum, not wall clock
                if position is not None and entry.position <= position:
                    continue
                yield entry
        finally:
            reader.close()
