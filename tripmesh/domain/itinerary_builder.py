"""Assemble legs into itineraries.

Totals live on ``Itinerary`` as computed fields, so building an itinerary is
mostly about producing well-formed legs and a collision-free id.
"""

from __future__ import annotations

import itertools
import uuid
from dataclasses import dataclass
from typing import Optional, Sequence

from tripmesh.domain.comfort import comfort_for
from tripmesh.domain.constants import MS_PER_MINUTE
from tripmesh.domain.enums import TransportMode
from tripmesh.domain.exceptions import InvalidItineraryError
from tripmesh.domain.fares import fare_cents
from tripmesh.domain.models import Coordinate, Itinerary, Leg

_sequence = itertools.count(1)


@dataclass(frozen=True)
class LegDraft:
    """A leg before it is placed on the timeline."""

    mode: TransportMode
    origin: Coordinate
    destination: Coordinate
    minutes: float
    distance_km: Optional[float] = None
    cost_cents: Optional[int] = None
    description: str = ""
    provider_id: str = ""


def build_leg(
    mode: TransportMode,
    origin: Coordinate,
    destination: Coordinate,
    *,
    start_time_ms: int,
    minutes: float,
    distance_km: Optional[float] = None,
    cost_cents: Optional[int] = None,
    comfort_score: Optional[float] = None,
    description: str = "",
    provider_id: str = "",
) -> Leg:
    """Build one leg; fare and comfort default to the mode tables."""
    duration_ms = int(round(max(0.0, float(minutes)) * MS_PER_MINUTE))
    if cost_cents is None:
        cost_cents = fare_cents(mode, distance_km or 0.0)
    return Leg(
        mode=mode,
        origin=origin,
        destination=destination,
        start_time_ms=int(start_time_ms),
        end_time_ms=int(start_time_ms) + duration_ms,
        cost_cents=max(0, int(cost_cents)),
        comfort_score=comfort_for(mode) if comfort_score is None else comfort_score,
        distance_km=None if distance_km is None else round(max(0.0, distance_km), 3),
        description=description,
        provider_id=provider_id,
    )


def new_itinerary_id(legs: Sequence[Leg], source: str = "") -> str:
    prefix = source or "itin"
    return f"{prefix}-{legs[0].start_time_ms}-{len(legs)}-{next(_sequence)}-{uuid.uuid4().hex[:6]}"


def summarize(legs: Sequence[Leg], *, source: str = "", degraded: bool = False) -> Itinerary:
    if not legs:
        raise InvalidItineraryError("cannot build an itinerary without legs")
    ordered = list(legs)
    return Itinerary(
        id=new_itinerary_id(ordered, source),
        legs=ordered,
        source=source,
        degraded=degraded,
    )


def resequence_legs(drafts: Sequence[LegDraft], start_time_ms: int) -> list[Leg]:
    """Place drafts back to back on one timeline starting at ``start_time_ms``."""
    legs: list[Leg] = []
    cursor = int(start_time_ms)
    for draft in drafts:
        leg = build_leg(
            draft.mode,
            draft.origin,
            draft.destination,
            start_time_ms=cursor,
            minutes=draft.minutes,
            distance_km=draft.distance_km,
            cost_cents=draft.cost_cents,
            description=draft.description,
            provider_id=draft.provider_id,
        )
        legs.append(leg)
        cursor = leg.end_time_ms
    return legs


__all__ = [
    "LegDraft",
    "build_leg",
    "new_itinerary_id",
    "summarize",
    "resequence_legs",
]
