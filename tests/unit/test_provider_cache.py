"""Provider answer cache: trip keys, LRU eviction and expiry."""

from __future__ import annotations

from tripmesh.infrastructure import cache as cache_module
from tripmesh.infrastructure.cache import ProviderCache, TripKey
from tripmesh.tools.interfaces import RouteInput, RouteResult


def _route(lat: float, lon: float, profile: str = "foot") -> RouteInput:
    return RouteInput(origin_lat=lat, origin_lon=lon, dest_lat=13.0358, dest_lon=77.5970, profile=profile)


def _result(seconds: float) -> RouteResult:
    return RouteResult(distance_m=1000.0, duration_s=seconds, provider="ors")


def test_trip_key_rounds_coordinates_and_keeps_profile():
    near = TripKey.for_request(_route(12.971601, 77.594601), "foot")
    same = TripKey.for_request(_route(12.971649, 77.594649), "foot")
    cycling = TripKey.for_request(_route(12.971601, 77.594601), "cycling")

    assert near == same
    assert near != cycling
    assert near.origin == (12.9716, 77.5946)


def test_least_recently_used_entry_is_evicted():
    cache = ProviderCache("route", ttl_seconds=60, max_entries=2)
    a, b, c = (TripKey.for_request(_route(12.9 + i / 100, 77.5), "foot") for i in range(3))
    cache.put(a, _result(60))
    cache.put(b, _result(120))
    assert cache.get(a) is not None
    cache.put(c, _result(180))

    assert cache.get(b) is None
    assert cache.get(a).duration_s == 60
    assert cache.get(c).duration_s == 180
    assert cache.stats["evictions"] == 1
    assert cache.stats["entries"] == 2


def test_entries_expire_after_ttl(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr(cache_module.time, "monotonic", lambda: clock[0])
    cache = ProviderCache("directions", ttl_seconds=30, max_entries=10)
    key = TripKey.for_request(_route(12.97, 77.59), "transit")

    cache.put(key, _result(600))
    clock[0] += 29
    assert cache.get(key) is not None
    clock[0] += 2
    assert cache.get(key) is None

    stats = cache.stats
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["entries"] == 0
    assert stats["hit_rate"] == 0.5


def test_clear_resets_entries_and_counters():
    cache = ProviderCache("route", ttl_seconds=60, max_entries=5)
    key = TripKey.for_request(_route(12.97, 77.59), "foot")
    cache.put(key, _result(60))
    cache.get(key)
    cache.clear()

    assert cache.get(key) is None
    assert cache.stats["hits"] == 0
    assert cache.stats["misses"] == 1
