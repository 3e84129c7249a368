"""Single-leg itineraries from a multi-mode directions provider."""

from __future__ import annotations

import logging
from typing import Any, Optional

from tripmesh.domain.enums import TransportMode
from tripmesh.domain.fares import fare_cents
from tripmesh.domain.itinerary_builder import build_leg, summarize
from tripmesh.domain.models import Coordinate, Itinerary, Preferences
from tripmesh.shared.exceptions import AdapterFault
from tripmesh.sources.base import PlanningContext
from tripmesh.tools.interfaces import DirectionsInput, DirectionsResult

_logger = logging.getLogger("tripmesh.sources")

DIRECT_MODES = ("transit", "walking", "bicycling", "driving")
_MODE_LABELS = {
    "walking": TransportMode.WALK,
    "bicycling": TransportMode.BIKE,
    "driving": TransportMode.RIDE_HAIL,
    "transit": TransportMode.BUS,
}
_METRO_VEHICLES = {"SUBWAY", "METRO_RAIL", "TRAM"}
_RAIL_VEHICLES = {"HEAVY_RAIL", "COMMUTER_TRAIN", "RAIL", "HIGH_SPEED_TRAIN"}


def translate_mode(provider_mode: str, transit_vehicle: str = "") -> TransportMode:
    label = provider_mode.strip().lower()
    if label == "transit":
        vehicle = transit_vehicle.strip().upper()
        if vehicle in _METRO_VEHICLES:
            return TransportMode.METRO
        if vehicle in _RAIL_VEHICLES:
            return TransportMode.RAIL
    try:
        return _MODE_LABELS[label]
    except KeyError:
        raise AdapterFault("direct", f"unknown provider mode {provider_mode!r}") from None


def _provider_fare_cents(result: DirectionsResult) -> Optional[int]:
    if result.fare_value is None:
        return None
    return int(round(result.fare_value * 100))


class DirectMultiModeSource:
    name = "direct"

    def __init__(self, directions_tool: Any, modes: tuple[str, ...] = DIRECT_MODES):
        self._tool = directions_tool
        self._modes = modes

    def _itinerary_for(
        self,
        provider_mode: str,
        result: DirectionsResult,
        origin: Coordinate,
        destination: Coordinate,
        context: PlanningContext,
    ) -> Itinerary:
        mode = translate_mode(provider_mode, result.transit_vehicle)
        distance_km = result.distance_m / 1000.0
        cost = _provider_fare_cents(result)
        if cost is None:
            cost = fare_cents(mode, distance_km)
        leg = build_leg(
            mode,
            origin,
            destination,
            start_time_ms=context.departure_ms,
            minutes=max(1.0, result.duration_s / 60.0),
            distance_km=distance_km,
            cost_cents=cost,
            description=f"{mode.value.replace('_', ' ').title()} via directions",
            provider_id=f"{self.name}:{provider_mode}",
        )
        return summarize([leg], source=self.name)

    def propose(
        self,
        origin: Coordinate,
        destination: Coordinate,
        prefs: Preferences,
        context: PlanningContext,
    ) -> list[Itinerary]:
        itineraries: list[Itinerary] = []
        faults: list[str] = []
        departure_s = context.departure_ms // 1000
        for provider_mode in self._modes:
            params = DirectionsInput(
                origin_lat=origin.lat,
                origin_lon=origin.lon,
                dest_lat=destination.lat,
                dest_lon=destination.lon,
                mode=provider_mode,
                departure_epoch_s=departure_s,
            )
            try:
                result = self._tool.get_directions(params)
            except AdapterFault as exc:
                _logger.warning("directions failed for mode=%s: %s", provider_mode, exc)
                faults.append(provider_mode)
                continue
            if result is None:
                continue
            itineraries.append(self._itinerary_for(provider_mode, result, origin, destination, context))

        if self._modes and len(faults) == len(self._modes):
            raise AdapterFault(self.name, f"all directions modes failed: {', '.join(faults)}")
        return itineraries


__all__ = ["DirectMultiModeSource", "translate_mode", "DIRECT_MODES"]
