"""Source contract shared by every itinerary provider."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from tripmesh.domain.models import Coordinate, Itinerary, Preferences


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class PlanningContext:
    """Per-request inputs that are not part of the trip itself."""

    departure_ms: int = field(default_factory=_now_ms)
    trace_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    origin_text: str = ""
    destination_text: str = ""
    city_hint: str = ""


@runtime_checkable
class SourceAdapter(Protocol):
    """Proposes itineraries for one origin/destination pair.

    ``propose`` returns an empty list when the provider has no route and
    raises ``AdapterFault`` only for provider failures.
    """

    name: str

    def propose(
        self,
        origin: Coordinate,
        destination: Coordinate,
        prefs: Preferences,
        context: PlanningContext,
    ) -> list[Itinerary]: ...


__all__ = ["PlanningContext", "SourceAdapter"]
