"""Routing adapter: OpenRouteService first, LocationIQ as fallback.

Environment: ORS_API_KEY, LOCATIONIQ_API_KEY
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from tripmesh.config.settings import resolve_provider_timeout_seconds
from tripmesh.infrastructure.cache import TripKey, route_cache
from tripmesh.security.http_client import SecureHttpClient
from tripmesh.security.key_manager import get_key_manager
from tripmesh.shared.exceptions import AdapterFault
from tripmesh.tools.interfaces import RouteInput, RouteResult

_ORS_URL = "https://api.openrouteservice.org/v2/directions/{profile}"
_LOCATIONIQ_URL = "https://us1.locationiq.com/v1/directions/{profile}/{coordinates}"

_ORS_PROFILES = {
    "foot": "foot-walking",
    "cycling": "cycling-road",
    "driving": "driving-car",
}
_LOCATIONIQ_PROFILES = {
    "foot": "walking",
    "cycling": "cycling",
    "driving": "driving",
}

_LOGGER = logging.getLogger("tripmesh.routing")
_timeout = resolve_provider_timeout_seconds()
_ors_http = SecureHttpClient(tool_name="ors_routing", timeout=_timeout, max_retries=0)
_liq_http = SecureHttpClient(tool_name="locationiq_routing", timeout=_timeout, max_retries=0)


def _to_result(summary: dict[str, Any], provider: str) -> RouteResult:
    try:
        return RouteResult(
            distance_m=float(summary.get("distance", 0) or 0),
            duration_s=float(summary.get("duration", 0) or 0),
            provider=provider,
        )
    except (TypeError, ValueError) as exc:
        raise AdapterFault(f"{provider}_routing", f"malformed route summary: {exc}") from None


def _route_with_ors(params: RouteInput, api_key: str) -> Optional[RouteResult]:
    profile = _ORS_PROFILES[params.profile]
    payload = {
        "coordinates": [
            [params.origin_lon, params.origin_lat],
            [params.dest_lon, params.dest_lat],
        ],
        "instructions": False,
        "geometry": False,
        "elevation": False,
    }
    data = _ors_http.post_json(
        _ORS_URL.format(profile=profile),
        payload=payload,
        headers={"Authorization": api_key, "Content-Type": "application/json"},
    )
    routes = data.get("routes") or []
    if not routes:
        return None
    summary: dict[str, Any] = routes[0].get("summary") or {}
    return _to_result(summary, "ors")


def _route_with_locationiq(params: RouteInput, api_key: str) -> Optional[RouteResult]:
    coordinates = f"{params.origin_lon},{params.origin_lat};{params.dest_lon},{params.dest_lat}"
    url = _LOCATIONIQ_URL.format(profile=_LOCATIONIQ_PROFILES[params.profile], coordinates=coordinates)
    data = _liq_http.get(
        url,
        params={"key": api_key, "overview": "false", "alternatives": "false", "steps": "false"},
        headers={"Accept": "application/json"},
    )
    routes = data.get("routes") or []
    if not routes:
        return None
    return _to_result(routes[0], "locationiq")


def route(params: RouteInput) -> Optional[RouteResult]:
    if params.profile not in _ORS_PROFILES:
        raise AdapterFault("routing", f"unsupported profile {params.profile}")

    cache_key = TripKey.for_request(params, params.profile)
    cached = route_cache.get(cache_key)
    if cached is not None:
        return cached

    km = get_key_manager()
    ors_key = km.get("ORS_API_KEY")
    liq_key = km.get("LOCATIONIQ_API_KEY")
    if not ors_key and not liq_key:
        raise AdapterFault("routing", "neither ORS_API_KEY nor LOCATIONIQ_API_KEY is set")

    result: Optional[RouteResult] = None
    if ors_key:
        try:
            result = _route_with_ors(params, ors_key)
        except AdapterFault as exc:
            if not liq_key:
                raise
            _LOGGER.warning("ors routing failed, falling back to locationiq: %s", exc)
            result = _route_with_locationiq(params, liq_key)
    else:
        result = _route_with_locationiq(params, liq_key or "")

    if result is not None:
        route_cache.put(cache_key, result)
    return result
