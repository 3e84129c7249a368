"""Offline routing estimate based on haversine distance."""

from __future__ import annotations

from typing import Optional

from tripmesh.domain.constants import ROAD_DISTANCE_FACTOR
from tripmesh.domain.geo import haversine
from tripmesh.shared.exceptions import AdapterFault
from tripmesh.tools.interfaces import RouteInput, RouteResult

SPEED_MAP = {
    "foot": 5.0,
    "cycling": 15.0,
    "driving": 30.0,
}


def route(params: RouteInput) -> Optional[RouteResult]:
    speed = SPEED_MAP.get(params.profile)
    if speed is None:
        raise AdapterFault("mock_routing", f"Unknown routing profile: {params.profile}")
    distance_km = haversine(params.origin_lat, params.origin_lon, params.dest_lat, params.dest_lon) * ROAD_DISTANCE_FACTOR
    return RouteResult(
        distance_m=round(distance_km * 1000, 1),
        duration_s=round(distance_km / speed * 3600, 1),
        provider="mock",
    )
