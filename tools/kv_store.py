"""Flat key-value slots backing the wardrobe store.

Each slot holds one serialized string. The wardrobe store decides what goes
in it and how to recover when it cannot be parsed.
"""
from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Dict, Optional


class KeyValueStore:
    """Interface for single-device slot persistence."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local slots; nothing survives a restart."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._slots: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        self._slots[key] = value

    def delete(self, key: str) -> None:
        self._slots.pop(key, None)


class JSONFileKeyValueStore(KeyValueStore):
    """One ``<key>.json`` file per slot under ``base_dir``."""

    def __init__(self, base_dir: str | Path = "data/wardrobe") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid slot key {key!r}")
        return self.base_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class SQLiteKeyValueStore(KeyValueStore):
    """Slots as rows of a single SQLite table."""

    def __init__(self, db_path: str | Path = "data/wardrobe.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS slots (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )

    def get(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM slots WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO slots(key, value) VALUES (?, ?)\n"
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, value),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM slots WHERE key = ?", (key,))


__all__ = [
    "InMemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "KeyValueStore",
    "SQLiteKeyValueStore",
]
