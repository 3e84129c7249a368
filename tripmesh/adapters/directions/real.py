"""Google Directions adapter.

Environment: GOOGLE_MAPS_API_KEY
Docs: https://developers.google.com/maps/documentation/directions/get-directions
"""

from __future__ import annotations

from typing import Any, Optional

from tripmesh.config.settings import resolve_provider_timeout_seconds
from tripmesh.infrastructure.cache import TripKey, directions_cache
from tripmesh.security.http_client import SecureHttpClient
from tripmesh.security.key_manager import get_key_manager
from tripmesh.shared.exceptions import AdapterFault
from tripmesh.tools.interfaces import DirectionsInput, DirectionsResult

_DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"
_SUPPORTED_MODES = {"transit", "walking", "bicycling", "driving"}
_NO_ROUTE_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}

_http = SecureHttpClient(
    tool_name="google_directions",
    timeout=resolve_provider_timeout_seconds(),
    max_retries=0,
)


def _get_api_key() -> str:
    key = get_key_manager().get("GOOGLE_MAPS_API_KEY")
    if not key:
        raise AdapterFault("google_directions", "GOOGLE_MAPS_API_KEY is not set")
    return key


def _first_transit_vehicle(route: dict[str, Any]) -> str:
    for leg in route.get("legs", []):
        for step in leg.get("steps", []) or []:
            if str(step.get("travel_mode", "")).upper() != "TRANSIT":
                continue
            vehicle = (
                step.get("transit_details", {})
                .get("line", {})
                .get("vehicle", {})
                .get("type", "")
            )
            if vehicle:
                return str(vehicle).upper()
    return ""


def _parse_route(data: dict[str, Any]) -> Optional[DirectionsResult]:
    routes = data.get("routes") or []
    if not routes:
        return None
    route = routes[0]
    legs = route.get("legs") or []
    distance_m = sum(float(leg.get("distance", {}).get("value", 0) or 0) for leg in legs)
    duration_s = sum(float(leg.get("duration", {}).get("value", 0) or 0) for leg in legs)
    fare = route.get("fare") or {}
    fare_value = fare.get("value")
    try:
        return DirectionsResult(
            distance_m=distance_m,
            duration_s=duration_s,
            fare_value=float(fare_value) if fare_value is not None else None,
            fare_currency=str(fare.get("currency", "")),
            transit_vehicle=_first_transit_vehicle(route),
        )
    except ValueError as exc:
        raise AdapterFault("google_directions", f"malformed route: {exc}") from None


def get_directions(params: DirectionsInput) -> Optional[DirectionsResult]:
    if params.mode not in _SUPPORTED_MODES:
        raise AdapterFault("google_directions", f"unsupported mode {params.mode}")

    cache_key = TripKey.for_request(params, params.mode)
    cached = directions_cache.get(cache_key)
    if cached is not None:
        return cached

    request_params: dict[str, Any] = {
        "origin": f"{params.origin_lat},{params.origin_lon}",
        "destination": f"{params.dest_lat},{params.dest_lon}",
        "mode": params.mode,
        "alternatives": "false",
        "departure_time": str(params.departure_epoch_s) if params.departure_epoch_s else "now",
        "key": _get_api_key(),
    }
    data = _http.get(_DIRECTIONS_URL, params=request_params, headers={"Accept": "application/json"})

    status = str(data.get("status", ""))
    if status in _NO_ROUTE_STATUSES:
        return None
    if status != "OK":
        message = data.get("error_message", "unknown error")
        raise AdapterFault("google_directions", f"status={status}: {get_key_manager().scrub_text(message)}")

    result = _parse_route(data)
    if result is not None:
        directions_cache.put(cache_key, result)
    return result
