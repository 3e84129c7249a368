"""Single-leg itineraries from a generic routing profile."""

from __future__ import annotations

from typing import Any

from tripmesh.domain.enums import TransportMode
from tripmesh.domain.itinerary_builder import build_leg, summarize
from tripmesh.domain.models import Coordinate, Itinerary, Preferences
from tripmesh.sources.base import PlanningContext
from tripmesh.tools.interfaces import RouteInput

PROFILE_MODES = {
    "foot": TransportMode.WALK,
    "cycling": TransportMode.BIKE,
    "driving": TransportMode.RIDE_HAIL,
}
# minor currency units per kilometer
PER_KM_RATE_CENTS = {
    "foot": 0,
    "cycling": 0,
    "driving": 1200,
}


class SingleModeRoutingSource:
    name = "single_mode"

    def __init__(self, routing_tool: Any, profiles: tuple[str, ...] = ("foot", "cycling", "driving")):
        self._tool = routing_tool
        self._profiles = profiles

    def propose(
        self,
        origin: Coordinate,
        destination: Coordinate,
        prefs: Preferences,
        context: PlanningContext,
    ) -> list[Itinerary]:
        itineraries: list[Itinerary] = []
        for profile in self._profiles:
            result = self._tool.route(
                RouteInput(
                    origin_lat=origin.lat,
                    origin_lon=origin.lon,
                    dest_lat=destination.lat,
                    dest_lon=destination.lon,
                    profile=profile,
                )
            )
            if result is None:
                continue
            distance_km = result.distance_m / 1000.0
            leg = build_leg(
                PROFILE_MODES[profile],
                origin,
                destination,
                start_time_ms=context.departure_ms,
                minutes=result.duration_s / 60.0,
                distance_km=distance_km,
                cost_cents=int(round(distance_km * PER_KM_RATE_CENTS[profile])),
                description=f"{profile} route",
                provider_id=f"{self.name}:{result.provider or profile}",
            )
            itineraries.append(summarize([leg], source=self.name))
        return itineraries


__all__ = ["SingleModeRoutingSource", "PROFILE_MODES", "PER_KM_RATE_CENTS"]
