"""Plan metrics tests."""

from __future__ import annotations

from tripmesh.observability.plan_metrics import PlanMetrics, get_plan_metrics


def test_plan_metrics_counts_plans_and_degraded():
    metrics = PlanMetrics()
    metrics.record_plan(latency_ms=120.0, degraded=False, candidate_count=5, trace_id="a")
    metrics.record_plan(latency_ms=480.0, degraded=True, candidate_count=1, trace_id="b")

    snapshot = metrics.snapshot()
    assert snapshot["total_plans"] == 2
    assert snapshot["degraded_plans"] == 1
    assert snapshot["latency"]["max_ms"] == 480.0
    assert snapshot["p95_latency_ms"] == 480.0
    assert [row["trace_id"] for row in snapshot["last_plans"]] == ["a", "b"]


def test_plan_metrics_tracks_source_outcomes():
    metrics = PlanMetrics()
    metrics.record_source_call(source="Direct", status="ok", latency_ms=30, returned_count=3)
    metrics.record_source_call(source="direct", status="timeout", latency_ms=8000)
    metrics.record_source_call(source="direct", status="failed", latency_ms=10)

    row = metrics.snapshot()["sources"]["direct"]
    assert (row["count"], row["ok"], row["timeout"], row["failed"]) == (3, 1, 1, 1)
    assert row["success_rate"] == round(1 / 3, 4)
    assert row["avg_returned_count"] == 1.0


def test_reset_and_singleton():
    metrics = get_plan_metrics()
    assert metrics is get_plan_metrics()
    metrics.record_plan(latency_ms=1, degraded=False, candidate_count=1)
    metrics.reset()
    assert metrics.snapshot()["total_plans"] == 0
