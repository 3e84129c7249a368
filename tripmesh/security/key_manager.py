"""Central provider key access.

Adapters read keys through ``get_key_manager()`` rather than ``os.getenv`` so
that every known key value can be scrubbed from logs and error messages.
"""

from __future__ import annotations

import os
import time
from typing import Optional

from tripmesh.security.redact import redact_sensitive
from tripmesh.shared.exceptions import KeyMissingError


class _KeyEntry:
    __slots__ = ("value", "loaded_at", "source")

    def __init__(self, value: str, source: str):
        self.value = value
        self.loaded_at = time.time()
        self.source = source


class KeyManager:
    def __init__(self):
        self._keys: dict[str, _KeyEntry] = {}

    def get(self, name: str, *, required: bool = False) -> Optional[str]:
        entry = self._keys.get(name)
        if entry is None:
            raw = os.getenv(name, "")
            if raw:
                entry = _KeyEntry(value=raw, source="env")
                self._keys[name] = entry
            elif required:
                raise KeyMissingError(name)
            else:
                return None
        return entry.value

    def has_key(self, name: str) -> bool:
        if name in self._keys:
            return True
        return bool(os.getenv(name, ""))

    @staticmethod
    def redact(value: str) -> str:
        """Keep only the first and last four characters."""
        if not value or len(value) <= 8:
            return "****"
        return value[:4] + "****" + value[-4:]

    def scrub_text(self, text: str) -> str:
        """Redact secret-looking values, then replace every loaded key by name.

        The placeholder survives another pass through ``redact_sensitive``.
        """
        result = redact_sensitive(str(text) if text is not None else "")
        for name, entry in self._keys.items():
            if entry.value and entry.value in result:
                result = result.replace(entry.value, f"[REDACTED:{name}]")
        return result

    def reload(self, name: str) -> None:
        raw = os.getenv(name, "")
        if raw:
            self._keys[name] = _KeyEntry(value=raw, source="env")
        elif name in self._keys:
            del self._keys[name]


_manager: Optional[KeyManager] = None


def get_key_manager() -> KeyManager:
    global _manager
    if _manager is None:
        _manager = KeyManager()
    return _manager
