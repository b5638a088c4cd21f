"""
Key-value store - the small string store that holds the leaderboard and the
last quiz's question keys.

Values are strings; JSON encoding is done by ``load_json``/``save_json``.
The store is best effort: unreadable data reads as empty and failed writes
are logged, never raised.
"""

import json
import threading
from pathlib import Path

from logging_setup import logger


class MemoryStore:
    """In-memory store, used for tests and throwaway sessions."""

    def __init__(self, data: dict = None):
        self._data = dict(data or {})

    def get(self, key: str):
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Store backed by one JSON object file mapping keys to string values."""

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Ignoring unreadable store %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            return {}
        return data

    def get(self, key: str):
        with self._lock:
            value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
            except IOError as e:
                logger.error("Error saving %r to %s: %s", key, self.path, e)


def load_json(store, key: str, default):
    """Decode a JSON value from the store, falling back to ``default``.

    The fallback is also used when the decoded value is not the same type as
    ``default`` (a leaderboard stored as an object, say).
    """
    raw = store.get(key)
    if raw is None:
        return default

    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.debug("Discarding malformed %r value in store", key)
        return default

    if default is not None and not isinstance(value, type(default)):
        return default
    return value


def save_json(store, key: str, value) -> None:
    store.set(key, json.dumps(value, ensure_ascii=False))
