from __future__ import annotations

import sqlite3

from tripmesh.domain.enums import TransportMode
from tripmesh.domain.models import Preferences, default_preferences
from tripmesh.persistence.preferences import (
    InMemoryPreferenceRepository,
    SQLitePreferenceRepository,
    get_preference_repository,
)


def test_memory_repository_defaults_and_roundtrip():
    repo = InMemoryPreferenceRepository()
    assert repo.load() == default_preferences()
    assert repo.load().max_transfers == 3

    prefs = Preferences(weight_time=0.6, weight_cost=0.2, weight_comfort=0.2, avoid_modes=[TransportMode.BUS])
    repo.save(prefs)
    assert repo.load() == prefs
    assert repo.load("someone-else") == default_preferences()


def test_sqlite_repository_persists_across_instances(tmp_path):
    db = tmp_path / "nested" / "prefs.sqlite3"
    prefs = Preferences(weight_time=0.2, weight_cost=0.7, weight_comfort=0.1, max_transfers=1)

    SQLitePreferenceRepository(db).save(prefs, "rider-1")
    reopened = SQLitePreferenceRepository(db)

    assert reopened.load("rider-1") == prefs
    assert reopened.load("rider-2") == default_preferences()


def test_sqlite_repository_recovers_from_corrupt_rows(tmp_path):
    db = tmp_path / "prefs.sqlite3"
    repo = SQLitePreferenceRepository(db)
    with sqlite3.connect(db) as conn:
        conn.execute(
            "INSERT INTO preferences (user_id, payload_json, updated_at) VALUES (?, ?, ?)",
            ("default", "{not json", "2024-01-01T00:00:00+00:00"),
        )
    assert repo.load() == default_preferences()


def test_factory_honors_env(monkeypatch, tmp_path):
    assert get_preference_repository().backend == "memory"

    monkeypatch.setenv("PREFERENCES_PERSISTENCE_ENABLED", "true")
    monkeypatch.setenv("PREFERENCES_DB", str(tmp_path / "prefs.sqlite3"))
    assert get_preference_repository().backend == "sqlite"
