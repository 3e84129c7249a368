"""Itineraries proposed by a generative collaborator, re-costed locally.

Generated durations are only hints. Each leg's distance is a share of the
estimated road distance, walk/bike/ride-hail legs are re-routed, and every
fare comes from the fare tables regardless of what was generated.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional, Sequence

from tripmesh.domain.constants import ASSUMED_SPEED_KMH
from tripmesh.domain.enums import TransportMode
from tripmesh.domain.fares import fare_cents
from tripmesh.domain.geo import estimate_minutes, estimate_road_km, interpolate, straight_line_km
from tripmesh.domain.itinerary_builder import LegDraft, resequence_legs, summarize
from tripmesh.domain.models import Coordinate, Itinerary, Preferences
from tripmesh.shared.exceptions import AdapterFault
from tripmesh.sources.base import PlanningContext
from tripmesh.tools.interfaces import GeneratedItinerary, GeneratedLeg, GenerationInput, RouteInput

_logger = logging.getLogger("tripmesh.sources")

# a generated leg longer than a day is treated as having no usable duration
_MAX_GENERATED_MINUTES = 24 * 60.0

_REROUTE_PROFILES = {
    TransportMode.WALK: "foot",
    TransportMode.BIKE: "cycling",
    TransportMode.RIDE_HAIL: "driving",
}
_MODE_ALIASES = {
    "WALKING": TransportMode.WALK,
    "FOOT": TransportMode.WALK,
    "CYCLE": TransportMode.BIKE,
    "CYCLING": TransportMode.BIKE,
    "BICYCLE": TransportMode.BIKE,
    "SUBWAY": TransportMode.METRO,
    "TRAIN": TransportMode.RAIL,
    "CAR": TransportMode.RIDE_HAIL,
    "TAXI": TransportMode.RIDE_HAIL,
    "CAB": TransportMode.RIDE_HAIL,
}


def parse_mode(raw: str) -> Optional[TransportMode]:
    label = raw.strip().upper().replace("-", "_").replace(" ", "_")
    if label in TransportMode.__members__:
        return TransportMode[label]
    return _MODE_ALIASES.get(label)


def _usable_minutes(leg: GeneratedLeg) -> Optional[float]:
    minutes = leg.minutes
    if minutes is None or not math.isfinite(minutes) or not 0 < minutes <= _MAX_GENERATED_MINUTES:
        return None
    return float(minutes)


def distance_shares(modes: Sequence[TransportMode], minutes: Sequence[Optional[float]]) -> list[float]:
    """Fractions of the trip covered by each leg, proportional to minutes x speed."""
    weights = []
    for mode, mins in zip(modes, minutes):
        speed = ASSUMED_SPEED_KMH.get(mode, ASSUMED_SPEED_KMH[TransportMode.WALK])
        weights.append((mins if mins is not None else 1.0) * speed)
    total = sum(weights)
    if total <= 0:
        return [1.0 / len(modes)] * len(modes) if modes else []
    return [w / total for w in weights]


class GenerativeSource:
    name = "generative"

    def __init__(self, generative_tool: Any, routing_tool: Any = None, *, count: int = 4):
        self._generator = generative_tool
        self._routing = routing_tool
        self._count = count

    def _reroute(self, mode: TransportMode, start: Coordinate, end: Coordinate) -> Optional[tuple[float, float]]:
        profile = _REROUTE_PROFILES.get(mode)
        if profile is None or self._routing is None:
            return None
        try:
            result = self._routing.route(
                RouteInput(
                    origin_lat=start.lat,
                    origin_lon=start.lon,
                    dest_lat=end.lat,
                    dest_lon=end.lon,
                    profile=profile,
                )
            )
        except AdapterFault as exc:
            _logger.warning("re-routing %s leg failed, using assumed speed: %s", mode.value, exc)
            return None
        if result is None or result.duration_s <= 0:
            return None
        return result.duration_s / 60.0, result.distance_m / 1000.0

    def _drafts_for(
        self,
        generated: GeneratedItinerary,
        origin: Coordinate,
        destination: Coordinate,
        road_km: float,
    ) -> list[LegDraft]:
        pairs = []
        for leg in generated.legs:
            mode = parse_mode(leg.mode)
            if mode is None:
                _logger.warning("dropping generated leg with unknown mode %r", leg.mode)
                continue
            pairs.append((mode, leg))
        if not pairs:
            return []

        modes = [mode for mode, _ in pairs]
        minutes = [_usable_minutes(leg) for _, leg in pairs]
        shares = distance_shares(modes, minutes)

        drafts: list[LegDraft] = []
        covered = 0.0
        for (mode, leg), mins, share in zip(pairs, minutes, shares):
            start = interpolate(origin, destination, covered)
            covered += share
            end = destination if len(drafts) == len(pairs) - 1 else interpolate(origin, destination, covered)
            distance_km = road_km * share

            routed = self._reroute(mode, start, end)
            if routed is not None:
                leg_minutes, distance_km = routed
            elif mode not in _REROUTE_PROFILES and mins is not None:
                leg_minutes = mins
            else:
                leg_minutes = estimate_minutes(distance_km, mode)

            drafts.append(
                LegDraft(
                    mode=mode,
                    origin=start,
                    destination=end,
                    minutes=leg_minutes,
                    distance_km=distance_km,
                    cost_cents=fare_cents(mode, distance_km),
                    description=leg.description,
                    provider_id=f"{self.name}:{generated.id or 'plan'}",
                )
            )
        return drafts

    def propose(
        self,
        origin: Coordinate,
        destination: Coordinate,
        prefs: Preferences,
        context: PlanningContext,
    ) -> list[Itinerary]:
        params = GenerationInput(
            origin_text=context.origin_text or origin.as_lat_lon(),
            destination_text=context.destination_text or destination.as_lat_lon(),
            city_hint=context.city_hint,
            distance_km=round(straight_line_km(origin, destination), 3),
            weight_time=prefs.weight_time,
            weight_cost=prefs.weight_cost,
            weight_comfort=prefs.weight_comfort,
            count=self._count,
        )
        generated = self._generator.generate_itineraries(params)
        road_km = estimate_road_km(origin, destination)

        itineraries: list[Itinerary] = []
        for candidate in generated.itineraries:
            drafts = self._drafts_for(candidate, origin, destination, road_km)
            if not drafts:
                continue
            legs = resequence_legs(drafts, context.departure_ms)
            itineraries.append(summarize(legs, source=self.name))
        return itineraries


__all__ = ["GenerativeSource", "parse_mode", "distance_shares"]
