"""Guaranteed candidates: the static walk/metro/walk plan and the degraded walk."""

from __future__ import annotations

import logging
from typing import Any, Optional

from tripmesh.domain.enums import TransportMode
from tripmesh.domain.geo import estimate_minutes, estimate_road_km, interpolate, straight_line_km
from tripmesh.domain.itinerary_builder import LegDraft, resequence_legs, summarize
from tripmesh.domain.models import Coordinate, Itinerary, Preferences
from tripmesh.shared.exceptions import AdapterFault
from tripmesh.sources.base import PlanningContext
from tripmesh.tools.interfaces import RouteInput

_logger = logging.getLogger("tripmesh.sources")

STATIC_SOURCE = "static"
DEGRADED_SOURCE = "degraded"
ACCESS_WALK_MAX_KM = 0.6
ACCESS_WALK_SHARE = 0.15
STATIC_TRANSIT_MINUTES = 20.0


def _access_km(trip_km: float) -> float:
    return min(ACCESS_WALK_MAX_KM, ACCESS_WALK_SHARE * trip_km)


def build_static_itinerary(
    origin: Coordinate,
    destination: Coordinate,
    departure_ms: int,
    *,
    access_minutes: Optional[float] = None,
    egress_minutes: Optional[float] = None,
) -> Itinerary:
    """Walk to a station, ride METRO for a fixed time, walk to the destination."""
    trip_km = straight_line_km(origin, destination)
    walk_km = _access_km(trip_km)
    fraction = walk_km / trip_km if trip_km > 0 else 0.0
    station_in = interpolate(origin, destination, fraction)
    station_out = interpolate(origin, destination, 1.0 - fraction)
    metro_km = max(0.0, trip_km - 2 * walk_km)

    if access_minutes is None:
        access_minutes = estimate_minutes(walk_km, TransportMode.WALK)
    if egress_minutes is None:
        egress_minutes = estimate_minutes(walk_km, TransportMode.WALK)

    drafts = [
        LegDraft(TransportMode.WALK, origin, station_in, access_minutes, walk_km, description="Walk to station"),
        LegDraft(TransportMode.METRO, station_in, station_out, STATIC_TRANSIT_MINUTES, metro_km, description="Metro"),
        LegDraft(TransportMode.WALK, station_out, destination, egress_minutes, walk_km, description="Walk to destination"),
    ]
    return summarize(resequence_legs(drafts, departure_ms), source=STATIC_SOURCE)


def build_degraded_itinerary(origin: Coordinate, destination: Coordinate, departure_ms: int) -> Itinerary:
    """A single walk leg returned when constraints filter out every candidate."""
    distance_km = estimate_road_km(origin, destination)
    draft = LegDraft(
        TransportMode.WALK,
        origin,
        destination,
        estimate_minutes(distance_km, TransportMode.WALK),
        distance_km,
        description="Walk the whole way",
    )
    return summarize(resequence_legs([draft], departure_ms), source=DEGRADED_SOURCE, degraded=True)


class StaticMixedModeSource:
    name = STATIC_SOURCE

    def __init__(self, routing_tool: Any = None):
        self._routing = routing_tool

    def _walk_minutes(self, start: Coordinate, end: Coordinate) -> Optional[float]:
        if self._routing is None:
            return None
        try:
            result = self._routing.route(
                RouteInput(
                    origin_lat=start.lat,
                    origin_lon=start.lon,
                    dest_lat=end.lat,
                    dest_lon=end.lon,
                    profile="foot",
                )
            )
        except AdapterFault as exc:
            _logger.warning("static walk routing failed, using 5 km/h: %s", exc)
            return None
        if result is None:
            return None
        return result.duration_s / 60.0

    def propose(
        self,
        origin: Coordinate,
        destination: Coordinate,
        prefs: Preferences,
        context: PlanningContext,
    ) -> list[Itinerary]:
        trip_km = straight_line_km(origin, destination)
        walk_km = _access_km(trip_km)
        fraction = walk_km / trip_km if trip_km > 0 else 0.0
        access = egress = None
        if walk_km > 0:
            access = self._walk_minutes(origin, interpolate(origin, destination, fraction))
            egress = self._walk_minutes(interpolate(origin, destination, 1.0 - fraction), destination)
        return [
            build_static_itinerary(
                origin,
                destination,
                context.departure_ms,
                access_minutes=access,
                egress_minutes=egress,
            )
        ]


__all__ = [
    "StaticMixedModeSource",
    "build_static_itinerary",
    "build_degraded_itinerary",
    "STATIC_SOURCE",
    "DEGRADED_SOURCE",
]
