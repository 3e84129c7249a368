"""Short-lived caches for provider answers.

Directions and routing answers are keyed by the trip rounded to about ten
metres plus the travel mode or profile, so repeated plans between the same
places reuse one provider call.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

ResultT = TypeVar("ResultT", bound=BaseModel)

_COORD_PRECISION = 4


@dataclass(frozen=True)
class TripKey:
    origin: tuple[float, float]
    destination: tuple[float, float]
    travel: str

    @classmethod
    def for_request(cls, params: Any, travel: str) -> "TripKey":
        """Build a key from any request carrying ``origin_*``/``dest_*`` coordinates."""
        return cls(
            origin=(round(params.origin_lat, _COORD_PRECISION), round(params.origin_lon, _COORD_PRECISION)),
            destination=(round(params.dest_lat, _COORD_PRECISION), round(params.dest_lon, _COORD_PRECISION)),
            travel=travel,
        )


class ProviderCache(Generic[ResultT]):
    """Thread-safe LRU of provider results; entries also expire after ``ttl_seconds``."""

    def __init__(self, name: str, *, ttl_seconds: float, max_entries: int):
        self.name = name
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._entries: OrderedDict[TripKey, tuple[ResultT, float]] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: TripKey) -> Optional[ResultT]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[1] < time.monotonic():
                del self._entries[key]
                entry = None
            if entry is None:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return entry[0]

    def put(self, key: TripKey, result: ResultT) -> None:
        with self._lock:
            self._entries[key] = (result, time.monotonic() + self._ttl)
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
                self._evictions += 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = self._misses = self._evictions = 0

    @property
    def stats(self) -> dict[str, Any]:
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": round(self._hits / lookups, 3) if lookups else 0.0,
            }


route_cache: ProviderCache = ProviderCache("route", ttl_seconds=900.0, max_entries=300)
directions_cache: ProviderCache = ProviderCache("directions", ttl_seconds=300.0, max_entries=300)
