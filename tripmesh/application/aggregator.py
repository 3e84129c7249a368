"""Concurrent fan-out over itinerary sources with partial-result tolerance."""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, wait
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from tripmesh.domain.enums import SourceStatus
from tripmesh.domain.exceptions import InvalidCoordinateError
from tripmesh.domain.geo import is_finite_coordinate
from tripmesh.domain.models import Coordinate, Itinerary, PlanResult, Preferences, SourceReport
from tripmesh.infrastructure.logging import StructuredLogger, get_logger
from tripmesh.observability.plan_metrics import PlanMetrics, get_plan_metrics
from tripmesh.security.redact import redact_sensitive
from tripmesh.sources.base import PlanningContext, SourceAdapter
from tripmesh.sources.fallback import STATIC_SOURCE, build_degraded_itinerary, build_static_itinerary

DEGRADED_RESULT = "DEGRADED_RESULT"


@dataclass
class _Outcome:
    latency_ms: float
    itineraries: list[Itinerary] = field(default_factory=list)
    error: Optional[BaseException] = None


def _run_source(
    source: SourceAdapter,
    origin: Coordinate,
    destination: Coordinate,
    prefs: Preferences,
    context: PlanningContext,
) -> _Outcome:
    started = time.perf_counter()
    try:
        items = list(source.propose(origin, destination, prefs, context))
    except Exception as exc:
        # reported as a failed source by the caller
        return _Outcome(latency_ms=(time.perf_counter() - started) * 1000.0, error=exc)
    return _Outcome(latency_ms=(time.perf_counter() - started) * 1000.0, itineraries=items)


def _start_source(
    source: SourceAdapter,
    origin: Coordinate,
    destination: Coordinate,
    prefs: Preferences,
    context: PlanningContext,
) -> Future:
    """Run one source on a daemon thread; a hung source never delays interpreter exit."""
    future: Future = Future()

    def _target() -> None:
        if future.set_running_or_notify_cancel():
            future.set_result(_run_source(source, origin, destination, prefs, context))

    threading.Thread(target=_target, name=f"tripmesh-source-{source.name}", daemon=True).start()
    return future


def dedupe_key(itinerary: Itinerary) -> tuple[Any, ...]:
    return (
        tuple(mode.value for mode in itinerary.modes),
        itinerary.total_time_min,
        itinerary.total_cost_cents,
    )


def dedupe(itineraries: Sequence[Itinerary]) -> list[Itinerary]:
    """Collapse exact duplicates; the first occurrence wins."""
    seen: set[tuple[Any, ...]] = set()
    unique: list[Itinerary] = []
    for itinerary in itineraries:
        key = dedupe_key(itinerary)
        if key in seen:
            continue
        seen.add(key)
        unique.append(itinerary)
    return unique


def apply_constraints(itineraries: Sequence[Itinerary], prefs: Preferences) -> list[Itinerary]:
    avoided = set(prefs.avoid_modes)
    kept: list[Itinerary] = []
    for itinerary in itineraries:
        if prefs.max_transfers is not None and itinerary.transfers > prefs.max_transfers:
            continue
        if avoided and any(leg.mode in avoided for leg in itinerary.legs):
            continue
        kept.append(itinerary)
    return kept


class Aggregator:
    def __init__(
        self,
        sources: Sequence[SourceAdapter],
        *,
        deadline_seconds: float = 8.0,
        logger: Optional[StructuredLogger] = None,
        metrics: Optional[PlanMetrics] = None,
        dedupe: bool = True,
    ) -> None:
        self._sources = list(sources)
        self._deadline = max(0.0, float(deadline_seconds))
        self._logger = logger
        self._metrics = metrics or get_plan_metrics()
        self._dedupe = dedupe

    @property
    def source_names(self) -> list[str]:
        return [source.name for source in self._sources]

    def _fan_out(
        self,
        origin: Coordinate,
        destination: Coordinate,
        prefs: Preferences,
        context: PlanningContext,
        logger: StructuredLogger,
    ) -> tuple[list[Itinerary], list[SourceReport]]:
        if not self._sources:
            return [], []

        futures: list[tuple[SourceAdapter, Future]] = []
        for source in self._sources:
            logger.source_start(source.name)
            futures.append((source, _start_source(source, origin, destination, prefs, context)))
        # anything still running after the deadline is abandoned; late answers are ignored
        done, _ = wait([future for _, future in futures], timeout=self._deadline)

        collected: list[Itinerary] = []
        reports: list[SourceReport] = []
        for source, future in futures:
            if future not in done:
                report = SourceReport(
                    source=source.name,
                    status=SourceStatus.TIMEOUT,
                    latency_ms=round(self._deadline * 1000.0, 1),
                    error=f"no answer within {self._deadline:g}s",
                )
            else:
                outcome: _Outcome = future.result()
                if outcome.error is not None:
                    message = redact_sensitive(f"{type(outcome.error).__name__}: {outcome.error}")
                    logger.error(f"source:{source.name}", message)
                    report = SourceReport(
                        source=source.name,
                        status=SourceStatus.FAILED,
                        latency_ms=round(outcome.latency_ms, 1),
                        error=message,
                    )
                else:
                    collected.extend(outcome.itineraries)
                    report = SourceReport(
                        source=source.name,
                        status=SourceStatus.OK,
                        count=len(outcome.itineraries),
                        latency_ms=round(outcome.latency_ms, 1),
                    )
            logger.source_end(source.name, status=report.status.value, count=report.count, error=report.error)
            self._metrics.record_source_call(
                source=source.name,
                status=report.status.value,
                latency_ms=report.latency_ms,
                returned_count=report.count,
            )
            reports.append(report)
        return collected, reports

    def plan(
        self,
        origin: Coordinate,
        destination: Coordinate,
        prefs: Preferences,
        context: Optional[PlanningContext] = None,
    ) -> PlanResult:
        """Collect candidates from every source and apply the user's constraints.

        Never returns an empty list: the static candidate is always present
        before filtering, and a degraded walk replaces an empty filtered set.
        Raises ``InvalidCoordinateError`` for non-finite or out-of-range input.
        """
        for label, point in (("origin", origin), ("destination", destination)):
            if not is_finite_coordinate(point):
                raise InvalidCoordinateError(f"{label} is not a valid coordinate: {point!r}")

        context = context or PlanningContext()
        logger = self._logger or get_logger(context.trace_id)
        started = time.perf_counter()

        candidates, reports = self._fan_out(origin, destination, prefs, context, logger)
        if not any(it.source == STATIC_SOURCE for it in candidates):
            candidates.append(build_static_itinerary(origin, destination, context.departure_ms))
        if self._dedupe:
            candidates = dedupe(candidates)

        itineraries = apply_constraints(candidates, prefs)
        warnings: list[str] = []
        degraded = False
        if not itineraries:
            degraded = True
            itineraries = [build_degraded_itinerary(origin, destination, context.departure_ms)]
            warnings.append(
                f"{DEGRADED_RESULT}: no candidate met the transfer and mode constraints; returning a walking fallback"
            )
            logger.warning("filter", warnings[-1], candidates=len(candidates))

        latency_ms = (time.perf_counter() - started) * 1000.0
        self._metrics.record_plan(
            latency_ms=latency_ms,
            degraded=degraded,
            candidate_count=len(itineraries),
            trace_id=logger.trace_id,
        )
        logger.summary(
            candidates=len(candidates),
            returned=len(itineraries),
            degraded=degraded,
            latency_ms=round(latency_ms, 1),
        )
        return PlanResult(
            itineraries=itineraries,
            degraded=degraded,
            warnings=warnings,
            source_reports=reports,
            trace_id=logger.trace_id,
        )


__all__ = ["Aggregator", "DEGRADED_RESULT", "apply_constraints", "dedupe", "dedupe_key"]
