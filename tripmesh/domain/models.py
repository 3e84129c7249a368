"""Pydantic domain models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from tripmesh.domain.constants import (
    DEFAULT_MAX_TRANSFERS,
    DEFAULT_WEIGHT_COMFORT,
    DEFAULT_WEIGHT_COST,
    DEFAULT_WEIGHT_TIME,
    FARE_CURRENCY,
    MS_PER_MINUTE,
)
from tripmesh.domain.enums import SourceStatus, TransportMode


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    lon: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)

    def as_lat_lon(self) -> str:
        return f"{self.lat},{self.lon}"


class Leg(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: TransportMode
    origin: Coordinate
    destination: Coordinate
    start_time_ms: int
    end_time_ms: int
    cost_cents: int = Field(default=0, ge=0)
    comfort_score: float = Field(default=0.6, ge=0.0, le=1.0)
    distance_km: Optional[float] = Field(default=None, ge=0.0)
    description: str = ""
    provider_id: str = ""

    @model_validator(mode="after")
    def _check_time_order(self) -> "Leg":
        if self.end_time_ms < self.start_time_ms:
            raise ValueError("leg end_time_ms must not precede start_time_ms")
        return self

    @property
    def duration_min(self) -> float:
        return (self.end_time_ms - self.start_time_ms) / MS_PER_MINUTE


class Itinerary(BaseModel):
    """Ordered legs plus totals that are always derived from them."""

    model_config = ConfigDict(frozen=True)

    id: str
    legs: list[Leg] = Field(min_length=1)
    source: str = ""
    degraded: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_time_min(self) -> int:
        elapsed = self.legs[-1].end_time_ms - self.legs[0].start_time_ms
        return max(0, elapsed) // MS_PER_MINUTE

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_cost_cents(self) -> int:
        return sum(leg.cost_cents for leg in self.legs)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average_comfort_score(self) -> float:
        return sum(leg.comfort_score for leg in self.legs) / len(self.legs)

    @property
    def transfers(self) -> int:
        return max(0, len(self.legs) - 1)

    @property
    def modes(self) -> list[TransportMode]:
        return [leg.mode for leg in self.legs]


class Preferences(BaseModel):
    weight_time: float = Field(default=DEFAULT_WEIGHT_TIME, ge=0.0)
    weight_cost: float = Field(default=DEFAULT_WEIGHT_COST, ge=0.0)
    weight_comfort: float = Field(default=DEFAULT_WEIGHT_COMFORT, ge=0.0)
    avoid_modes: list[TransportMode] = Field(default_factory=list)
    max_transfers: Optional[int] = Field(default=None, ge=0)


def default_preferences() -> Preferences:
    return Preferences(max_transfers=DEFAULT_MAX_TRANSFERS)


class FareResult(BaseModel):
    base_fare: int
    discount: int = 0
    final_fare: int
    currency: str = FARE_CURRENCY


class Recommendation(BaseModel):
    itinerary: Itinerary
    score: float
    rationale: list[str] = Field(default_factory=list)


class SourceReport(BaseModel):
    source: str
    status: SourceStatus
    count: int = 0
    latency_ms: float = 0.0
    error: str = ""


class PlanResult(BaseModel):
    itineraries: list[Itinerary] = Field(min_length=1)
    degraded: bool = False
    warnings: list[str] = Field(default_factory=list)
    source_reports: list[SourceReport] = Field(default_factory=list)
    trace_id: str = ""


class LearningOutcome(BaseModel):
    preferences: Preferences
    message: str
    adjusted: bool = False
