"""
Preference Store - Durable key-value storage for search settings.

Values are typed on access (string, boolean, string list, list of records)
and every getter takes a default that is returned on first run or when the
stored value has the wrong type.

SqlitePreferenceStore keeps one row per key with a JSON-encoded value:

    prefs(key TEXT PRIMARY KEY, value TEXT)

Writes are committed before the call returns. set_many() writes several
keys in a single transaction so a mutation touching the order, default and
disabled set lands all at once.
"""

import json
import sqlite3
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from searchengines.errors import PersistenceFailure

_MISSING = object()


class PreferenceStore(ABC):
    """Typed get-or-default access over a raw key-value backend."""

    @abstractmethod
    def _read(self, key: str) -> Any:
        """Return the stored value, or _MISSING."""
        ...

    @abstractmethod
    def set_many(self, values: dict[str, Any]) -> None:
        """Durably store several values at once."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...

    def close(self) -> None:
        pass

    def _typed(self, key: str, default, check):
        value = self._read(key)
        if value is _MISSING:
            return default
        if not check(value):
            logger.warning(f"Ignoring stored value for {key}: unexpected type {type(value).__name__}")
            return default
        return value

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._typed(key, default, lambda v: isinstance(v, str))

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self._typed(key, default, lambda v: isinstance(v, bool))

    def get_string_list(self, key: str, default: Optional[list[str]] = None) -> Optional[list[str]]:
        value = self._typed(
            key, default,
            lambda v: isinstance(v, list) and all(isinstance(i, str) for i in v),
        )
        return list(value) if value is not None else None

    def get_records(self, key: str) -> list[dict]:
        value = self._typed(key, [], lambda v: isinstance(v, list))
        return [dict(r) for r in value if isinstance(r, dict)]

    def set_string(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_bool(self, key: str, value: bool) -> None:
        self.set_many({key: bool(value)})

    def set_string_list(self, key: str, value: list[str]) -> None:
        self.set_many({key: list(value)})

    def set_records(self, key: str, value: list[dict]) -> None:
        self.set_many({key: [dict(r) for r in value]})


class MemoryPreferenceStore(PreferenceStore):
    """In-process store; nothing survives the process."""

    def __init__(self):
        self._values: dict[str, str] = {}

    def _read(self, key):
        if key not in self._values:
            return _MISSING
        return json.loads(self._values[key])

    def set_many(self, values):
        # Encode everything first so a bad value leaves the store untouched
        try:
            encoded = {key: json.dumps(value) for key, value in values.items()}
        except (TypeError, ValueError) as e:
            raise PersistenceFailure(f"Cannot encode preference values: {e}") from e
        self._values.update(encoded)

    def remove(self, key):
        self._values.pop(key, None)


class SqlitePreferenceStore(PreferenceStore):
    """
    SQLite-backed preference store.

    Uses a persistent connection in WAL mode. The connection is shared
    between threads and guarded by a lock.
    """

    def __init__(self, db_path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

        try:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._init_database()
        except sqlite3.Error as e:
            logger.exception(f"Failed to open preference store at {self.db_path}")
            raise PersistenceFailure(f"Cannot open {self.db_path}: {e}") from e
        logger.debug(f"SqlitePreferenceStore initialized with db at {self.db_path}")

    def _init_database(self):
        """Create database schema if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS prefs (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        self._conn.commit()

    def _read(self, key):
        with self._lock:
            try:
                row = self._conn.execute(
                    "SELECT value FROM prefs WHERE key = ?", (key,)
                ).fetchone()
            except sqlite3.Error as e:
                logger.exception(f"Failed to read preference {key}")
                raise PersistenceFailure(f"Cannot read {key}: {e}") from e

        if row is None:
            return _MISSING
        try:
            return json.loads(row[0])
        except ValueError:
            logger.warning(f"Ignoring corrupt stored value for {key}")
            return _MISSING

    def set_many(self, values):
        try:
            rows = [(key, json.dumps(value)) for key, value in values.items()]
        except (TypeError, ValueError) as e:
            raise PersistenceFailure(f"Cannot encode preference values: {e}") from e

        with self._lock:
            try:
                with self._conn:
                    self._conn.executemany("""
                        INSERT INTO prefs (key, value) VALUES (?, ?)
                        ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """, rows)
            except sqlite3.Error as e:
                logger.exception(f"Failed to write preferences {sorted(values)}")
                raise PersistenceFailure(f"Cannot write preferences: {e}") from e

    def remove(self, key):
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute("DELETE FROM prefs WHERE key = ?", (key,))
            except sqlite3.Error as e:
                logger.exception(f"Failed to remove preference {key}")
                raise PersistenceFailure(f"Cannot remove {key}: {e}") from e

    def close(self):
        with self._lock:
            self._conn.close()
