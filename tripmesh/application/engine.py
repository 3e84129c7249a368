"""Library entry points: plan, rank and learn from a selection."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from tripmesh.adapters.tool_factory import (
    describe_active_tools,
    get_directions_tool,
    get_generative_tool,
    get_routing_tool,
)
from tripmesh.application.aggregator import Aggregator
from tripmesh.config.settings import EngineSettings, load_settings
from tripmesh.domain.learning import learn_from_selection
from tripmesh.domain.models import Coordinate, Itinerary, LearningOutcome, PlanResult, Preferences, Recommendation
from tripmesh.domain.scoring import rank, recommend
from tripmesh.infrastructure.cache import directions_cache, route_cache
from tripmesh.observability.plan_metrics import get_plan_metrics
from tripmesh.persistence.preferences import DEFAULT_USER, PreferenceRepository, get_preference_repository
from tripmesh.shared.exceptions import AdapterFault
from tripmesh.sources import (
    DirectMultiModeSource,
    GenerativeSource,
    PlanningContext,
    SingleModeRoutingSource,
    SourceAdapter,
    StaticMixedModeSource,
)

_logger = logging.getLogger("tripmesh.engine")


class PlanningEngine:
    def __init__(
        self,
        aggregator: Aggregator,
        preference_repo: PreferenceRepository,
        *,
        settings: Optional[EngineSettings] = None,
        user_id: str = DEFAULT_USER,
    ) -> None:
        self.aggregator = aggregator
        self.preference_repo = preference_repo
        self.settings = settings or EngineSettings()
        self.user_id = user_id

    def get_preferences(self) -> Preferences:
        return self.preference_repo.load(self.user_id)

    def set_preferences(self, prefs: Preferences) -> Preferences:
        self.preference_repo.save(prefs, self.user_id)
        return prefs

    def plan(
        self,
        origin: Coordinate,
        destination: Coordinate,
        prefs: Optional[Preferences] = None,
        context: Optional[PlanningContext] = None,
    ) -> PlanResult:
        """Plan a trip and return candidates ranked best first."""
        prefs = prefs or self.get_preferences()
        result = self.aggregator.plan(origin, destination, prefs, context)
        return result.model_copy(update={"itineraries": rank(result.itineraries, prefs)})

    def rank(self, itineraries: Sequence[Itinerary], prefs: Optional[Preferences] = None) -> list[Itinerary]:
        return rank(itineraries, prefs or self.get_preferences())

    def recommend(
        self,
        itineraries: Sequence[Itinerary],
        prefs: Optional[Preferences] = None,
    ) -> list[Recommendation]:
        return recommend(itineraries, prefs or self.get_preferences())

    def learn_from_selection(self, selected: Itinerary, candidates: Sequence[Itinerary]) -> LearningOutcome:
        """Adjust the stored weights from one observed choice; saves only when adjusted."""
        outcome = learn_from_selection(selected, candidates, self.get_preferences())
        if outcome.adjusted:
            self.preference_repo.save(outcome.preferences, self.user_id)
        return outcome

    def diagnostics(self) -> dict[str, Any]:
        return {
            "sources": self.aggregator.source_names,
            "tools": describe_active_tools(),
            "settings": self.settings.model_dump(),
            "preferences_backend": getattr(self.preference_repo, "backend", "unknown"),
            "cache": {
                "route": route_cache.stats,
                "directions": directions_cache.stats,
            },
            "metrics": get_plan_metrics().snapshot(),
        }


def _optional_tool(factory, name: str) -> Any:
    try:
        return factory()
    except AdapterFault as exc:
        _logger.warning("%s tool unavailable: %s", name, exc)
        return None


def build_sources(settings: EngineSettings) -> list[SourceAdapter]:
    routing = _optional_tool(get_routing_tool, "routing")
    sources: list[SourceAdapter] = []
    for name in settings.enabled_sources:
        if name == "direct":
            directions = _optional_tool(get_directions_tool, "directions")
            if directions is not None:
                sources.append(DirectMultiModeSource(directions))
        elif name == "single_mode":
            if routing is not None:
                sources.append(SingleModeRoutingSource(routing))
        elif name == "generative":
            generator = _optional_tool(get_generative_tool, "generative")
            if generator is not None:
                sources.append(GenerativeSource(generator, routing, count=settings.generative_count))
        elif name == "static":
            sources.append(StaticMixedModeSource(routing))
    return sources


def build_engine(
    settings: Optional[EngineSettings] = None,
    *,
    preference_repo: Optional[PreferenceRepository] = None,
) -> PlanningEngine:
    settings = settings or load_settings()
    aggregator = Aggregator(
        build_sources(settings),
        deadline_seconds=settings.plan_deadline_seconds,
        dedupe=settings.dedupe,
    )
    return PlanningEngine(aggregator, preference_repo or get_preference_repository(), settings=settings)


__all__ = ["PlanningEngine", "build_engine", "build_sources"]
