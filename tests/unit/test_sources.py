"""Itinerary source tests with in-process fake collaborators."""

from __future__ import annotations

import pytest

from tripmesh.domain.enums import TransportMode
from tripmesh.domain.fares import fare_cents
from tripmesh.domain.geo import estimate_road_km
from tripmesh.domain.models import Coordinate, Preferences
from tripmesh.shared.exceptions import AdapterFault
from tripmesh.sources import (
    DirectMultiModeSource,
    GenerativeSource,
    PlanningContext,
    SingleModeRoutingSource,
    StaticMixedModeSource,
    build_degraded_itinerary,
    build_static_itinerary,
)
from tripmesh.sources.direct import translate_mode
from tripmesh.sources.generative import distance_shares, parse_mode
from tripmesh.tools.interfaces import DirectionsResult, GenerationResult, RouteResult, parse_generation_payload

ORIGIN = Coordinate(lat=12.9716, lon=77.5946)
DESTINATION = Coordinate(lat=13.0358, lon=77.5970)
T0 = 1_700_000_000_000
CONTEXT = PlanningContext(departure_ms=T0, trace_id="test")


class _Directions:
    def __init__(self, answers: dict):
        self.answers = answers
        self.calls: list[str] = []

    def get_directions(self, params):
        self.calls.append(params.mode)
        answer = self.answers.get(params.mode)
        if isinstance(answer, Exception):
            raise answer
        return answer


class _Routing:
    def __init__(self, duration_s: float = 600.0, distance_m: float = 5000.0, fail: bool = False):
        self.duration_s = duration_s
        self.distance_m = distance_m
        self.fail = fail
        self.profiles: list[str] = []

    def route(self, params):
        self.profiles.append(params.profile)
        if self.fail:
            raise AdapterFault("fake_routing", "down")
        return RouteResult(distance_m=self.distance_m, duration_s=self.duration_s, provider="fake")


class _Generator:
    def __init__(self, payload=None, error: Exception | None = None):
        self.payload = payload
        self.error = error
        self.params = None

    def generate_itineraries(self, params):
        self.params = params
        if self.error is not None:
            raise self.error
        return parse_generation_payload(self.payload)


def test_translate_mode_uses_transit_vehicle():
    assert translate_mode("transit", "SUBWAY") == TransportMode.METRO
    assert translate_mode("transit", "heavy_rail") == TransportMode.RAIL
    assert translate_mode("transit", "") == TransportMode.BUS
    assert translate_mode("driving") == TransportMode.RIDE_HAIL
    with pytest.raises(AdapterFault):
        translate_mode("teleport")


def test_direct_source_skips_failed_and_empty_modes():
    tool = _Directions(
        {
            "transit": DirectionsResult(distance_m=7000, duration_s=1500, fare_value=35.0, transit_vehicle="SUBWAY"),
            "walking": DirectionsResult(distance_m=20, duration_s=30),
            "bicycling": None,
            "driving": AdapterFault("google_directions", "quota"),
        }
    )
    items = DirectMultiModeSource(tool).propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)

    assert tool.calls == ["transit", "walking", "bicycling", "driving"]
    assert [it.modes for it in items] == [[TransportMode.METRO], [TransportMode.WALK]]
    metro, walk = items
    assert metro.total_cost_cents == 3500
    assert metro.average_comfort_score == pytest.approx(0.7)
    assert walk.total_time_min == 1
    assert all(it.legs[0].start_time_ms == T0 for it in items)
    assert all(it.source == "direct" for it in items)


def test_direct_source_falls_back_to_fare_tables():
    tool = _Directions({"driving": DirectionsResult(distance_m=10000, duration_s=1200)})
    items = DirectMultiModeSource(tool, modes=("driving",)).propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)
    assert items[0].total_cost_cents == 16000
    assert items[0].modes == [TransportMode.RIDE_HAIL]


def test_direct_source_raises_when_every_mode_faults():
    fault = AdapterFault("google_directions", "down")
    tool = _Directions({mode: fault for mode in ("transit", "walking", "bicycling", "driving")})
    with pytest.raises(AdapterFault):
        DirectMultiModeSource(tool).propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)


def test_single_mode_source_applies_per_km_rates():
    routing = _Routing(duration_s=600, distance_m=5000)
    items = SingleModeRoutingSource(routing).propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)

    assert routing.profiles == ["foot", "cycling", "driving"]
    assert [it.modes[0] for it in items] == [TransportMode.WALK, TransportMode.BIKE, TransportMode.RIDE_HAIL]
    assert [it.total_cost_cents for it in items] == [0, 0, 6000]
    assert all(it.total_time_min == 10 for it in items)


def test_single_mode_source_propagates_routing_faults():
    with pytest.raises(AdapterFault):
        SingleModeRoutingSource(_Routing(fail=True)).propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)


def test_parse_mode_accepts_aliases_and_rejects_unknown():
    assert parse_mode("walking") == TransportMode.WALK
    assert parse_mode("ride-hail") == TransportMode.RIDE_HAIL
    assert parse_mode("Subway") == TransportMode.METRO
    assert parse_mode("hovercraft") is None


def test_distance_shares_follow_minutes_times_speed():
    shares = distance_shares([TransportMode.WALK, TransportMode.METRO], [6.0, 20.0])
    assert shares == pytest.approx([30 / 730, 700 / 730])
    assert sum(distance_shares([TransportMode.BUS], [None])) == pytest.approx(1.0)


def test_generative_source_recomputes_durations_and_fares():
    payload = {
        "itineraries": [
            {
                "id": "g1",
                "legs": [
                    {"mode": "WALK", "minutes": 5, "costCents": 999999},
                    {"mode": "METRO", "minutes": 20, "costCents": 999999},
                    {"mode": "HOVERCRAFT", "minutes": 3},
                    {"mode": "WALK", "minutes": 5},
                ],
            },
            {"id": "junk", "legs": [{"mode": "HOVERCRAFT", "minutes": 10}]},
        ]
    }
    generator = _Generator(payload)
    routing = _Routing(duration_s=420, distance_m=350)
    items = GenerativeSource(generator, routing).propose(
        ORIGIN,
        DESTINATION,
        Preferences(),
        PlanningContext(departure_ms=T0, origin_text="MG Road", destination_text="Hebbal"),
    )

    assert len(items) == 1
    itinerary = items[0]
    assert itinerary.modes == [TransportMode.WALK, TransportMode.METRO, TransportMode.WALK]
    assert routing.profiles == ["foot", "foot"]
    assert [leg.duration_min for leg in itinerary.legs] == pytest.approx([7.0, 20.0, 7.0])
    assert itinerary.total_time_min == 34

    metro_km = estimate_road_km(ORIGIN, DESTINATION) * (700 / 750)
    assert itinerary.legs[1].cost_cents == fare_cents(TransportMode.METRO, metro_km)
    assert itinerary.total_cost_cents < 999999

    assert itinerary.legs[0].start_time_ms == T0
    assert itinerary.legs[0].origin == ORIGIN
    assert itinerary.legs[-1].destination == DESTINATION
    for previous, current in zip(itinerary.legs, itinerary.legs[1:]):
        assert current.start_time_ms == previous.end_time_ms
        assert current.origin == previous.destination
    assert generator.params.origin_text == "MG Road"


def test_generative_source_uses_assumed_speed_without_routing():
    payload = {"itineraries": [{"legs": [{"mode": "BIKE", "minutes": 0}]}]}
    items = GenerativeSource(_Generator(payload)).propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)
    expected_minutes = estimate_road_km(ORIGIN, DESTINATION) / 15.0 * 60
    assert items[0].legs[0].duration_min == pytest.approx(expected_minutes, abs=0.01)
    assert items[0].total_cost_cents == 0


def test_generative_source_survives_reroute_faults():
    payload = {"itineraries": [{"legs": [{"mode": "WALK", "minutes": 12}, {"mode": "BUS", "minutes": 25}]}]}
    items = GenerativeSource(_Generator(payload), _Routing(fail=True)).propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)
    assert len(items) == 1
    assert items[0].legs[1].duration_min == pytest.approx(25.0)


def test_generative_source_propagates_generator_faults():
    source = GenerativeSource(_Generator(error=AdapterFault("openai_generative", "timeout")))
    with pytest.raises(AdapterFault):
        source.propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)


def test_generative_source_returns_empty_for_empty_payload():
    source = GenerativeSource(_Generator({"itineraries": []}))
    assert source.propose(ORIGIN, DESTINATION, Preferences(), CONTEXT) == []


def test_static_source_builds_walk_metro_walk():
    items = StaticMixedModeSource().propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)
    assert len(items) == 1
    itinerary = items[0]
    assert itinerary.modes == [TransportMode.WALK, TransportMode.METRO, TransportMode.WALK]
    assert itinerary.legs[1].duration_min == pytest.approx(20.0)
    # 0.6 km access walk at 5 km/h
    assert itinerary.legs[0].duration_min == pytest.approx(7.2)
    assert itinerary.source == "static"


def test_static_source_uses_routed_walks_and_tolerates_faults():
    routed = StaticMixedModeSource(_Routing(duration_s=300)).propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)
    assert routed[0].legs[0].duration_min == pytest.approx(5.0)

    fallback = StaticMixedModeSource(_Routing(fail=True)).propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)
    assert fallback[0].legs[0].duration_min == pytest.approx(7.2)


def test_static_itinerary_handles_zero_length_trip():
    itinerary = build_static_itinerary(ORIGIN, ORIGIN, T0)
    assert itinerary.total_time_min == 20
    assert itinerary.legs[0].duration_min == 0


def test_degraded_itinerary_is_a_single_flagged_walk():
    itinerary = build_degraded_itinerary(ORIGIN, DESTINATION, T0)
    assert itinerary.degraded is True
    assert itinerary.modes == [TransportMode.WALK]
    assert itinerary.total_cost_cents == 0


def test_generative_source_drops_non_finite_generated_legs():
    payload = {
        "itineraries": [
            {"id": "ok", "legs": [{"mode": "METRO", "minutes": 20}]},
            {"id": "inf", "legs": [{"mode": "METRO", "minutes": float("inf")}]},
            {"id": "huge", "legs": [{"mode": "METRO", "minutes": 1e400}]},
        ]
    }
    items = GenerativeSource(_Generator(payload)).propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)
    assert len(items) == 1
    assert items[0].legs[0].duration_min == pytest.approx(20.0)


def test_generative_source_ignores_implausible_durations():
    from tripmesh.domain.geo import estimate_minutes
    from tripmesh.tools.interfaces import GeneratedItinerary, GeneratedLeg

    class _Fixed:
        def generate_itineraries(self, params):
            leg = GeneratedLeg(mode="METRO", minutes=1e305)
            return GenerationResult(itineraries=[GeneratedItinerary(legs=[leg])])

    items = GenerativeSource(_Fixed()).propose(ORIGIN, DESTINATION, Preferences(), CONTEXT)
    expected = estimate_minutes(estimate_road_km(ORIGIN, DESTINATION), TransportMode.METRO)
    assert items[0].legs[0].duration_min == pytest.approx(expected, abs=0.01)


def test_tool_results_reject_non_finite_numbers():
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        RouteResult(distance_m=1000.0, duration_s=float("inf"))
    with pytest.raises(ValidationError):
        DirectionsResult(distance_m=float("nan"), duration_s=60.0)
