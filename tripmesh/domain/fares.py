"""Distance-based fare tables for metro, bus and ride-hail.

Fares are integer major currency units (rupees). Callers that store costs on
legs convert with ``fare_cents``. Every mode resolves to a fare; unknown modes
and active modes (walking, cycling) are free.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

from tripmesh.domain.constants import FARE_CURRENCY
from tripmesh.domain.enums import TransportMode
from tripmesh.domain.models import FareResult

# (upper bound km inclusive, fare); the last entry covers everything beyond
_METRO_BANDS: tuple[tuple[float, int], ...] = tuple((float(km), km * 5) for km in range(2, 31, 2))
_METRO_MAX_FARE = 160
_METRO_DISCOUNT_RATE = 0.05

_BUS_BANDS: tuple[tuple[float, int], ...] = (
    (3.0, 15),
    (6.0, 20),
    (10.0, 30),
    (15.0, 40),
    (20.0, 50),
    (25.0, 60),
    (30.0, 70),
)
_BUS_MAX_FARE = 80
_BUS_AC_PREMIUM = 1.75
_BUS_ROUNDING_STEP = 5

_RIDE_HAIL_BASE = 40
_RIDE_HAIL_PER_KM = 12

_MODE_ALIASES = {
    "METRO": TransportMode.METRO,
    "BMRCL": TransportMode.METRO,
    "BUS": TransportMode.BUS,
    "BMTC": TransportMode.BUS,
    "WALK": TransportMode.WALK,
    "WALKING": TransportMode.WALK,
    "BIKE": TransportMode.BIKE,
    "CYCLE": TransportMode.BIKE,
    "CYCLING": TransportMode.BIKE,
    "RIDE_HAIL": TransportMode.RIDE_HAIL,
    "CAR": TransportMode.RIDE_HAIL,
    "UBER": TransportMode.RIDE_HAIL,
    "OLA": TransportMode.RIDE_HAIL,
    "RAIL": TransportMode.RAIL,
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _band_fare(distance_km: float, bands: tuple[tuple[float, int], ...], ceiling: int) -> int:
    for upper_km, band_fare in bands:
        if distance_km <= upper_km:
            return band_fare
    return ceiling


def _resolve_mode(mode: TransportMode | str) -> TransportMode | None:
    raw = str(getattr(mode, "value", mode) or "").strip().upper()
    return _MODE_ALIASES.get(raw)


def _zero() -> FareResult:
    return FareResult(base_fare=0, discount=0, final_fare=0, currency=FARE_CURRENCY)


def metro_fare(distance_km: float) -> FareResult:
    base = _band_fare(distance_km, _METRO_BANDS, _METRO_MAX_FARE)
    discount = _round_half_up(base * _METRO_DISCOUNT_RATE)
    return FareResult(base_fare=base, discount=discount, final_fare=base - discount, currency=FARE_CURRENCY)


def bus_fare(distance_km: float, air_conditioned: bool = False) -> FareResult:
    base = _band_fare(distance_km, _BUS_BANDS, _BUS_MAX_FARE)
    if air_conditioned:
        base = _round_half_up(base * _BUS_AC_PREMIUM)
    base = _round_half_up(base / _BUS_ROUNDING_STEP) * _BUS_ROUNDING_STEP
    return FareResult(base_fare=base, discount=0, final_fare=base, currency=FARE_CURRENCY)


def ride_hail_fare(distance_km: float) -> FareResult:
    total = _round_half_up(_RIDE_HAIL_BASE + max(0.0, distance_km) * _RIDE_HAIL_PER_KM)
    return FareResult(base_fare=total, discount=0, final_fare=total, currency=FARE_CURRENCY)


def fare(mode: TransportMode | str, distance_km: float, *, air_conditioned: bool = False) -> FareResult:
    """Resolve the fare for one leg.

    ``air_conditioned`` only affects buses. Non-finite distances are treated
    as zero so the lowest band always applies.
    """
    distance = float(distance_km) if math.isfinite(float(distance_km)) else 0.0
    resolved = _resolve_mode(mode)
    if resolved == TransportMode.METRO:
        return metro_fare(distance)
    if resolved == TransportMode.BUS:
        return bus_fare(distance, air_conditioned=air_conditioned)
    if resolved == TransportMode.RIDE_HAIL:
        return ride_hail_fare(distance)
    return _zero()


def fare_cents(mode: TransportMode | str, distance_km: float, *, air_conditioned: bool = False) -> int:
    return fare(mode, distance_km, air_conditioned=air_conditioned).final_fare * 100


def _leg_fields(leg: Mapping[str, Any] | Any) -> tuple[Any, float, bool]:
    if isinstance(leg, Mapping):
        return leg.get("mode", ""), float(leg.get("distance_km", 0.0) or 0.0), bool(leg.get("air_conditioned", False))
    return (
        getattr(leg, "mode", ""),
        float(getattr(leg, "distance_km", 0.0) or 0.0),
        bool(getattr(leg, "air_conditioned", False)),
    )


def total_fare_cents(legs: Iterable[Mapping[str, Any] | Any]) -> int:
    total = 0
    for leg in legs:
        mode, distance, ac = _leg_fields(leg)
        total += fare_cents(mode, distance, air_conditioned=ac)
    return total


def fare_breakdown(legs: Iterable[Mapping[str, Any] | Any]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for leg in legs:
        mode, distance, ac = _leg_fields(leg)
        result = fare(mode, distance, air_conditioned=ac)
        rows.append(
            {
                "mode": str(getattr(mode, "value", mode)),
                "distance_km": distance,
                "fare": result.final_fare,
                "currency": result.currency,
                "air_conditioned": ac,
            }
        )
    return rows


__all__ = [
    "fare",
    "fare_cents",
    "metro_fare",
    "bus_fare",
    "ride_hail_fare",
    "total_fare_cents",
    "fare_breakdown",
]
