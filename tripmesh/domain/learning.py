"""Nudge preference weights from an observed selection.

Each observation moves weights by a fixed step, never proportionally, then
renormalizes them to sum to one.
"""

from __future__ import annotations

from statistics import fmean
from typing import Sequence

from tripmesh.domain.constants import LEARNING_COST_TOLERANCE, LEARNING_STEP
from tripmesh.domain.models import Itinerary, LearningOutcome, Preferences

_NO_EVIDENCE_MESSAGE = "Not enough alternatives to learn from; preferences unchanged."
_BALANCED_MESSAGE = "Your choice matches your current balance; preferences unchanged."


def _normalized(time_w: float, cost_w: float, comfort_w: float) -> tuple[float, float, float]:
    weights = [max(0.0, time_w), max(0.0, cost_w), max(0.0, comfort_w)]
    total = sum(weights)
    if total <= 0:
        return 1 / 3, 1 / 3, 1 / 3
    time_n = weights[0] / total
    cost_n = weights[1] / total
    return time_n, cost_n, 1.0 - time_n - cost_n


def _shift(prefs: Preferences, *, time: float = 0.0, cost: float = 0.0, comfort: float = 0.0) -> Preferences:
    time_w, cost_w, comfort_w = _normalized(
        prefs.weight_time + time,
        prefs.weight_cost + cost,
        prefs.weight_comfort + comfort,
    )
    return prefs.model_copy(
        update={
            "weight_time": time_w,
            "weight_cost": cost_w,
            "weight_comfort": max(0.0, comfort_w),
        }
    )


def learn_from_selection(
    selected: Itinerary,
    candidates: Sequence[Itinerary],
    prefs: Preferences,
    *,
    step: float = LEARNING_STEP,
) -> LearningOutcome:
    others = [it for it in candidates if it.id != selected.id]
    if not others:
        return LearningOutcome(preferences=prefs, message=_NO_EVIDENCE_MESSAGE, adjusted=False)

    mean_time = fmean(it.total_time_min for it in others)
    mean_cost = fmean(it.total_cost_cents for it in others)
    mean_comfort = fmean(it.average_comfort_score for it in others)

    faster = selected.total_time_min < mean_time
    comfier = selected.average_comfort_score > mean_comfort
    cheaper = selected.total_cost_cents < mean_cost * (1.0 - LEARNING_COST_TOLERANCE)
    pricier = not cheaper
    half = step / 2

    if faster and comfier:
        updated = _shift(prefs, time=half, comfort=half, cost=-step)
        message = "You picked a faster, more comfortable option; time and comfort now weigh more."
    elif faster and pricier:
        updated = _shift(prefs, time=step, cost=-step)
        message = "You paid more to arrive sooner; time now weighs more than cost."
    elif comfier and pricier:
        updated = _shift(prefs, comfort=step, cost=-step)
        message = "You paid more for comfort; comfort now weighs more than cost."
    elif cheaper:
        updated = _shift(prefs, time=-half, comfort=-half, cost=step)
        message = "You picked a cheaper option; cost now weighs more."
    else:
        return LearningOutcome(preferences=prefs, message=_BALANCED_MESSAGE, adjusted=False)

    return LearningOutcome(preferences=updated, message=message, adjusted=True)


__all__ = ["learn_from_selection"]
