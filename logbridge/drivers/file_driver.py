import json
import threading
from pathlib import Path


class JsonlFileDriver:
    """
    Appends delivered entries to a JSONL file.

    Each entry is written as a single JSON object per line, so the output can
    be tailed or replayed line by line.
    """

    def __init__(self, id, path, rules=()):
        self.id = id
        self.rules = list(rules)
        self._path = Path(path)
        self._lock = threading.Lock()

        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self._path, "a", encoding="utf-8")

    def receive(self, level, category, date, message):
        record = {
            "date": date.isoformat(),
            "level": level.name.lower(),
            "category": category,
            "message": message,
        }
        with self._lock:
            self._file.write(json.dumps(record) + "\n")
            self._file.flush()

    def close(self):
        with self._lock:
            if not self._file.closed:
                self._file.close()
