"""Preference store: load on session start, save on every change."""

from __future__ import annotations

import json
import os
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from tripmesh.config.settings import is_enabled
from tripmesh.domain.models import Preferences, default_preferences

_DEFAULT_DB_PATH = Path("data") / "tripmesh.sqlite3"
DEFAULT_USER = "default"


class PreferenceRepository(Protocol):
    backend: str

    def load(self, user_id: str = DEFAULT_USER) -> Preferences: ...

    def save(self, prefs: Preferences, user_id: str = DEFAULT_USER) -> None: ...


class InMemoryPreferenceRepository:
    backend = "memory"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: dict[str, Preferences] = {}

    def load(self, user_id: str = DEFAULT_USER) -> Preferences:
        with self._lock:
            stored = self._rows.get(user_id)
        return stored.model_copy(deep=True) if stored is not None else default_preferences()

    def save(self, prefs: Preferences, user_id: str = DEFAULT_USER) -> None:
        with self._lock:
            self._rows[user_id] = prefs.model_copy(deep=True)


class SQLitePreferenceRepository:
    backend = "sqlite"

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=5.0)
        conn.execute("PRAGMA journal_mode=WAL;")
        return conn

    def _init_schema(self) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS preferences (
                    user_id TEXT PRIMARY KEY,
                    payload_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    def load(self, user_id: str = DEFAULT_USER) -> Preferences:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                "SELECT payload_json FROM preferences WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        if row is None:
            return default_preferences()
        try:
            return Preferences.model_validate(json.loads(row[0]))
        except (json.JSONDecodeError, ValidationError):
            return default_preferences()

    def save(self, prefs: Preferences, user_id: str = DEFAULT_USER) -> None:
        payload = json.dumps(prefs.model_dump(mode="json"), separators=(",", ":"))
        now = datetime.now(timezone.utc).isoformat()
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO preferences (user_id, payload_json, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    payload_json=excluded.payload_json,
                    updated_at=excluded.updated_at
                """,
                (user_id, payload, now),
            )


def _enabled() -> bool:
    return is_enabled(os.getenv("PREFERENCES_PERSISTENCE_ENABLED"))


def _db_path() -> Path:
    raw = os.getenv("PREFERENCES_DB", "").strip()
    return Path(raw) if raw else _DEFAULT_DB_PATH


def get_preference_repository() -> PreferenceRepository:
    if not _enabled():
        return InMemoryPreferenceRepository()
    return SQLitePreferenceRepository(_db_path())


__all__ = [
    "DEFAULT_USER",
    "PreferenceRepository",
    "InMemoryPreferenceRepository",
    "SQLitePreferenceRepository",
    "get_preference_repository",
]
