"""
Counter Repository – storage for the daily quote-number counters.

Two interchangeable stores with the same ``increment(key) -> int``
contract: an in-process dictionary, and a JSON file for counters that
must survive restarts.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path

from app.exceptions import CounterStoreError


class InMemoryCounterStore:
    """Counters that live as long as the process."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._lock = threading.Lock()

    def increment(self, key: str) -> int:
        with self._lock:
            self._counts[key] = self._counts.get(key, 0) + 1
            return self._counts[key]

    def peek(self, key: str) -> int:
        return self._counts.get(key, 0)


class JsonFileCounterStore:
    """
    Counters persisted in a single JSON object ``{key: count}``.

    Writes go to a temp file in the same directory and are moved into
    place, so a crash never leaves a half-written counter file.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def increment(self, key: str) -> int:
        with self._lock:
            counts = self._read()
            counts[key] = counts.get(key, 0) + 1
            self._write(counts)
            return counts[key]

    def peek(self, key: str) -> int:
        return self._read().get(key, 0)

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def _read(self) -> dict[str, int]:
        if not self._path.exists():
            return {}
        # counters must never go backwards, so a damaged file is an error
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise CounterStoreError(f"counter file {self._path} is unreadable") from e
        if not isinstance(data, dict):
            raise CounterStoreError(f"counter file {self._path} is not a JSON object")
        for key, value in data.items():
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise CounterStoreError(
                    f"counter file {self._path} has an invalid value for {key!r}: {value!r}"
                )
        return data

    def _write(self, counts: dict[str, int]) -> None:
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(counts, f, indent=2, sort_keys=True)
            os.replace(tmp, self._path)
        except OSError as e:
            raise CounterStoreError(f"could not write counter file {self._path}") from e
        finally:
            if os.path.exists(tmp):
                os.unlink(tmp)
