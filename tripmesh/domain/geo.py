"""Deterministic distance and travel-time estimation."""

from __future__ import annotations

import math

from tripmesh.domain.constants import ASSUMED_SPEED_KMH, ROAD_DISTANCE_FACTOR
from tripmesh.domain.enums import TransportMode
from tripmesh.domain.models import Coordinate


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    radius_km = 6371.0
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    return radius_km * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def straight_line_km(origin: Coordinate, destination: Coordinate) -> float:
    return haversine(origin.lat, origin.lon, destination.lat, destination.lon)


def estimate_road_km(origin: Coordinate, destination: Coordinate) -> float:
    return straight_line_km(origin, destination) * ROAD_DISTANCE_FACTOR


def estimate_minutes(distance_km: float, mode: TransportMode) -> float:
    speed = ASSUMED_SPEED_KMH.get(mode, ASSUMED_SPEED_KMH[TransportMode.WALK])
    return (max(0.0, distance_km) / speed) * 60


def interpolate(origin: Coordinate, destination: Coordinate, fraction: float) -> Coordinate:
    t = max(0.0, min(1.0, fraction))
    return Coordinate(
        lat=origin.lat + (destination.lat - origin.lat) * t,
        lon=origin.lon + (destination.lon - origin.lon) * t,
    )


def is_finite_coordinate(point: Coordinate) -> bool:
    lat = getattr(point, "lat", None)
    lon = getattr(point, "lon", None)
    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


__all__ = [
    "haversine",
    "straight_line_km",
    "estimate_road_km",
    "estimate_minutes",
    "interpolate",
    "is_finite_coordinate",
]
