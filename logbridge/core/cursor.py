"""
Read position tracking and optional on-disk persistence of that position.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Optional

from logbridge.data.sources.base import Position
from logbridge.exceptions import OutOfOrderError

logger = logging.getLogger(__name__)


class CursorTracker:
    """
    Holds the last committed read position.

    `reset()` and `restore()` rewind or replace the position, so they consult
    `reset_guard` first; the owning watcher installs one that raises
    InvalidStateError unless polling is idle.
    """

    def __init__(self, position: Optional[Position] = None,
                 reset_guard: Optional[Callable[[str], None]] = None):
        self._position = position
        self._lock = threading.Lock()
        self.reset_guard = reset_guard

    def current(self) -> Optional[Position]:
        with self._lock:
            return self._position

    def advance(self, position: Position) -> None:
        with self._lock:
            if self._position is not None and position < self._position:
                raise OutOfOrderError(self._position, position)
            self._position = position

    def reset(self) -> None:
        if self.reset_guard is not None:
            self.reset_guard("reset the cursor")
        with self._lock:
            self._position = None
        logger.info("Cursor reset")

    def restore(self, position: Optional[Position]) -> None:
        if self.reset_guard is not None:
            self.reset_guard("restore the cursor")
        with self._lock:
            self._position = position
        logger.info("Cursor restored to %s", position)


class CursorStore:
    """
    Keeps a cursor in a small JSON file between runs.
    """

    def __init__(self, path):
        self.path = Path(os.path.expanduser(str(path)))

    def load(self) -> Optional[Position]:
        """Load the cursor if the file exists and is readable."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return Position(int(data['timestamp_us']), int(data['sequence']),
                            token=data.get('token'), epoch=data.get('epoch'))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable cursor file %s: %s", self.path, e)
            return None

    def save(self, position: Optional[Position]) -> None:
        if position is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        record = {
            'timestamp_us': position.timestamp_us,
            'sequence': position.sequence,
            'token': position.token,
            'epoch': position.epoch,
        }
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(record, f)
        os.replace(tmp_path, self.path)
        logger.debug("Saved cursor %s to %s", position, self.path)
