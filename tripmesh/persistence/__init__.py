"""Preference persistence."""

from tripmesh.persistence.preferences import (
    InMemoryPreferenceRepository,
    PreferenceRepository,
    SQLitePreferenceRepository,
    get_preference_repository,
)

__all__ = [
    "InMemoryPreferenceRepository",
    "PreferenceRepository",
    "SQLitePreferenceRepository",
    "get_preference_repository",
]
