"""Preference-weighted utility and ranking for itineraries."""

from __future__ import annotations

from typing import Iterable

from tripmesh.domain.constants import FARE_CURRENCY
from tripmesh.domain.models import Itinerary, Preferences, Recommendation

_RATIONALE_WEIGHT_THRESHOLD = 0.4


def score(itinerary: Itinerary, prefs: Preferences) -> float:
    # reciprocal normalization keeps time and cost in (0, 1] without a pass over the set
    normalized_time = 1.0 / (1.0 + itinerary.total_time_min)
    normalized_cost = 1.0 / (1.0 + itinerary.total_cost_cents / 100.0)
    return (
        prefs.weight_time * normalized_time
        + prefs.weight_cost * normalized_cost
        + prefs.weight_comfort * itinerary.average_comfort_score
    )


def rank(itineraries: Iterable[Itinerary], prefs: Preferences) -> list[Itinerary]:
    """Sort descending by utility; equal scores keep input order."""
    return sorted(itineraries, key=lambda it: score(it, prefs), reverse=True)


def build_rationale(itinerary: Itinerary, prefs: Preferences) -> list[str]:
    lines: list[str] = []
    if prefs.weight_time > _RATIONALE_WEIGHT_THRESHOLD:
        lines.append(f"Favors time: {itinerary.total_time_min} min total")
    if prefs.weight_cost > _RATIONALE_WEIGHT_THRESHOLD:
        lines.append(f"Favors cost: {FARE_CURRENCY} {itinerary.total_cost_cents / 100:.2f}")
    if prefs.weight_comfort > _RATIONALE_WEIGHT_THRESHOLD:
        lines.append(f"Favors comfort: {round(itinerary.average_comfort_score * 100)}%")
    if itinerary.transfers > 0:
        lines.append(f"{itinerary.transfers} transfers")
    if itinerary.degraded:
        lines.append("Fallback option: ignores some of your constraints")
    return lines


def recommend(itineraries: Iterable[Itinerary], prefs: Preferences) -> list[Recommendation]:
    return [
        Recommendation(
            itinerary=it,
            score=score(it, prefs),
            rationale=build_rationale(it, prefs),
        )
        for it in rank(itineraries, prefs)
    ]


__all__ = ["score", "rank", "build_rationale", "recommend"]
