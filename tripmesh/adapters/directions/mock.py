"""Offline directions estimate based on haversine distance."""

from __future__ import annotations

from typing import Optional

from tripmesh.domain.geo import haversine
from tripmesh.domain.constants import ROAD_DISTANCE_FACTOR
from tripmesh.shared.exceptions import AdapterFault
from tripmesh.tools.interfaces import DirectionsInput, DirectionsResult

SPEED_MAP = {
    "walking": 5.0,
    "bicycling": 15.0,
    "transit": 22.0,
    "driving": 30.0,
}
# waiting and access time added to transit estimates
_TRANSIT_OVERHEAD_MIN = 8.0
_SUBWAY_MIN_KM = 8.0


def get_directions(params: DirectionsInput) -> Optional[DirectionsResult]:
    speed = SPEED_MAP.get(params.mode)
    if speed is None:
        raise AdapterFault("mock_directions", f"Unknown travel mode: {params.mode}")
    distance_km = haversine(params.origin_lat, params.origin_lon, params.dest_lat, params.dest_lon) * ROAD_DISTANCE_FACTOR
    minutes = distance_km / speed * 60
    vehicle = ""
    if params.mode == "transit":
        minutes += _TRANSIT_OVERHEAD_MIN
        vehicle = "SUBWAY" if distance_km >= _SUBWAY_MIN_KM else "BUS"
    return DirectionsResult(
        distance_m=round(distance_km * 1000, 1),
        duration_s=round(minutes * 60, 1),
        transit_vehicle=vehicle,
    )
