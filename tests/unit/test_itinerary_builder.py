"""Leg and itinerary construction tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tripmesh.domain.constants import MS_PER_MINUTE
from tripmesh.domain.enums import TransportMode
from tripmesh.domain.exceptions import InvalidItineraryError
from tripmesh.domain.itinerary_builder import LegDraft, build_leg, resequence_legs, summarize
from tripmesh.domain.models import Coordinate, Leg

A = Coordinate(lat=12.9716, lon=77.5946)
B = Coordinate(lat=12.9800, lon=77.6000)
C = Coordinate(lat=12.9900, lon=77.6100)
T0 = 1_700_000_000_000


def test_summarize_rejects_empty_leg_list():
    with pytest.raises(InvalidItineraryError):
        summarize([])


def test_totals_use_elapsed_time_including_gaps():
    walk = build_leg(TransportMode.WALK, A, B, start_time_ms=T0, minutes=10, cost_cents=0, comfort_score=0.6)
    metro = build_leg(
        TransportMode.METRO,
        B,
        C,
        start_time_ms=walk.end_time_ms + 5 * 60_000,
        minutes=20,
        cost_cents=2800,
        comfort_score=0.7,
    )
    itinerary = summarize([walk, metro], source="test")

    assert itinerary.total_time_min == 35
    assert itinerary.total_cost_cents == 2800
    assert itinerary.average_comfort_score == pytest.approx(0.65)
    assert itinerary.transfers == 1
    assert itinerary.modes == [TransportMode.WALK, TransportMode.METRO]


def test_total_time_truncates_partial_minutes():
    leg = build_leg(TransportMode.WALK, A, B, start_time_ms=T0, minutes=1.5)
    assert summarize([leg]).total_time_min == 1


def test_build_leg_defaults_fare_and_comfort_from_mode_tables():
    leg = build_leg(TransportMode.METRO, A, B, start_time_ms=T0, minutes=12, distance_km=5)
    assert leg.cost_cents == 2800
    assert leg.comfort_score == pytest.approx(0.7)
    assert leg.end_time_ms - leg.start_time_ms == 12 * 60_000


def test_leg_rejects_end_before_start():
    with pytest.raises(ValidationError):
        Leg(mode=TransportMode.BUS, origin=A, destination=B, start_time_ms=T0, end_time_ms=T0 - 1)


def test_leg_rejects_negative_cost_and_out_of_range_comfort():
    with pytest.raises(ValidationError):
        Leg(mode=TransportMode.BUS, origin=A, destination=B, start_time_ms=T0, end_time_ms=T0, cost_cents=-1)
    with pytest.raises(ValidationError):
        Leg(mode=TransportMode.BUS, origin=A, destination=B, start_time_ms=T0, end_time_ms=T0, comfort_score=1.2)


def test_coordinate_rejects_nan_and_out_of_range():
    with pytest.raises(ValidationError):
        Coordinate(lat=float("nan"), lon=0.0)
    with pytest.raises(ValidationError):
        Coordinate(lat=91.0, lon=0.0)


def test_identical_itineraries_get_distinct_ids():
    leg = build_leg(TransportMode.WALK, A, B, start_time_ms=T0, minutes=10)
    first = summarize([leg], source="direct")
    second = summarize([leg], source="direct")
    assert first.id != second.id
    assert first.id.startswith("direct-")


def test_itinerary_is_frozen():
    itinerary = summarize([build_leg(TransportMode.WALK, A, B, start_time_ms=T0, minutes=10)])
    with pytest.raises(ValidationError):
        itinerary.source = "other"


def test_resequence_places_legs_back_to_back():
    drafts = [
        LegDraft(TransportMode.WALK, A, B, 4.0, 0.3),
        LegDraft(TransportMode.BUS, B, C, 15.0, 4.0),
        LegDraft(TransportMode.WALK, C, A, 3.0, 0.2),
    ]
    legs = resequence_legs(drafts, T0)

    assert legs[0].start_time_ms == T0
    for previous, current in zip(legs, legs[1:]):
        assert current.start_time_ms == previous.end_time_ms
    assert summarize(legs).total_time_min == 22
    assert legs[1].cost_cents == 2000


def test_computed_totals_are_serialized():
    itinerary = summarize([build_leg(TransportMode.BUS, A, B, start_time_ms=T0, minutes=10, distance_km=5)])
    payload = itinerary.model_dump(mode="json")
    assert payload["total_time_min"] == 10
    assert payload["total_cost_cents"] == 2000
    assert payload["average_comfort_score"] == pytest.approx(0.6)


def test_leg_and_itinerary_minutes_share_one_clock():
    leg = build_leg(TransportMode.BUS, A, B, start_time_ms=T0, minutes=12.5, cost_cents=1500)
    assert leg.end_time_ms - leg.start_time_ms == int(12.5 * MS_PER_MINUTE)
    assert leg.duration_min == pytest.approx(12.5)
    assert summarize([leg]).total_time_min == 12
