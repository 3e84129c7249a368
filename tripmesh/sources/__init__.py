"""Itinerary sources fanned out by the aggregator."""

from tripmesh.sources.base import PlanningContext, SourceAdapter
from tripmesh.sources.direct import DirectMultiModeSource
from tripmesh.sources.fallback import StaticMixedModeSource, build_degraded_itinerary, build_static_itinerary
from tripmesh.sources.generative import GenerativeSource
from tripmesh.sources.single_mode import SingleModeRoutingSource

__all__ = [
    "PlanningContext",
    "SourceAdapter",
    "DirectMultiModeSource",
    "SingleModeRoutingSource",
    "GenerativeSource",
    "StaticMixedModeSource",
    "build_static_itinerary",
    "build_degraded_itinerary",
]
