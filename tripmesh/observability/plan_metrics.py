"""In-process metrics for planning calls and per-source outcomes."""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass

_MAX_SAMPLES = 5000
_MAX_HISTORY = 200


@dataclass
class _LatencyAgg:
    total_ms: float = 0.0
    count: int = 0
    max_ms: float = 0.0
    values: list[float] | None = None

    def __post_init__(self) -> None:
        if self.values is None:
            self.values = []

    def add(self, value_ms: float) -> None:
        val = max(0.0, float(value_ms))
        self.total_ms += val
        self.count += 1
        self.max_ms = max(self.max_ms, val)
        self.values.append(val)
        if len(self.values) > _MAX_SAMPLES:
            self.values = self.values[-_MAX_SAMPLES:]

    def p95(self) -> float:
        if not self.values:
            return 0.0
        rows = sorted(self.values)
        idx = max(0, min(len(rows) - 1, math.ceil(len(rows) * 0.95) - 1))
        return rows[idx]

    def snapshot(self) -> dict[str, float]:
        avg_ms = (self.total_ms / self.count) if self.count else 0.0
        return {
            "count": self.count,
            "avg_ms": round(avg_ms, 2),
            "max_ms": round(self.max_ms, 2),
            "p95_ms": round(self.p95(), 2),
        }


@dataclass
class _SourceStats:
    ok: int = 0
    failed: int = 0
    timeout: int = 0
    returned_total: int = 0
    latency: _LatencyAgg | None = None

    def __post_init__(self) -> None:
        if self.latency is None:
            self.latency = _LatencyAgg()

    @property
    def count(self) -> int:
        return self.ok + self.failed + self.timeout


class PlanMetrics:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_plans = 0
        self._degraded_plans = 0
        self._latency = _LatencyAgg()
        self._sources: dict[str, _SourceStats] = {}
        self._history: list[dict[str, object]] = []

    def record_plan(
        self,
        *,
        latency_ms: float,
        degraded: bool,
        candidate_count: int,
        trace_id: str = "",
    ) -> None:
        with self._lock:
            self._total_plans += 1
            if degraded:
                self._degraded_plans += 1
            self._latency.add(latency_ms)
            self._history.append(
                {
                    "trace_id": trace_id,
                    "degraded": bool(degraded),
                    "candidate_count": max(0, int(candidate_count)),
                    "latency_ms": round(max(0.0, float(latency_ms)), 2),
                }
            )
            if len(self._history) > _MAX_HISTORY:
                self._history = self._history[-_MAX_HISTORY:]

    def record_source_call(
        self,
        *,
        source: str,
        status: str,
        latency_ms: float,
        returned_count: int = 0,
    ) -> None:
        key = (source or "unknown").strip().lower() or "unknown"
        with self._lock:
            row = self._sources.setdefault(key, _SourceStats())
            if status == "ok":
                row.ok += 1
            elif status == "timeout":
                row.timeout += 1
            else:
                row.failed += 1
            row.returned_total += max(0, int(returned_count))
            row.latency.add(latency_ms)

    def _source_snapshot(self) -> dict[str, object]:
        output: dict[str, object] = {}
        for name, row in self._sources.items():
            count = row.count
            output[name] = {
                "count": count,
                "ok": row.ok,
                "failed": row.failed,
                "timeout": row.timeout,
                "success_rate": round(row.ok / count, 4) if count else 0.0,
                "avg_returned_count": round(row.returned_total / count, 2) if count else 0.0,
                "latency": row.latency.snapshot(),
            }
        return output

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            return {
                "total_plans": self._total_plans,
                "degraded_plans": self._degraded_plans,
                "latency": self._latency.snapshot(),
                "p95_latency_ms": round(self._latency.p95(), 2),
                "sources": self._source_snapshot(),
                "last_plans": list(self._history),
            }

    def reset(self) -> None:
        with self._lock:
            self._total_plans = 0
            self._degraded_plans = 0
            self._latency = _LatencyAgg()
            self._sources = {}
            self._history = []


_metrics_lock = threading.Lock()
_metrics: PlanMetrics | None = None


def get_plan_metrics() -> PlanMetrics:
    global _metrics
    with _metrics_lock:
        if _metrics is None:
            _metrics = PlanMetrics()
        return _metrics


__all__ = ["PlanMetrics", "get_plan_metrics"]
