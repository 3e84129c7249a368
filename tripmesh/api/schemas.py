"""API request/response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from tripmesh.domain.models import (
    Coordinate,
    Itinerary,
    Preferences,
    Recommendation,
    SourceReport,
)


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = ""


class PlanRequest(BaseModel):
    origin: Coordinate
    destination: Coordinate
    preferences: Optional[Preferences] = Field(
        default=None,
        description="Overrides the stored preferences for this call only",
    )
    origin_text: str = Field(default="", max_length=200)
    destination_text: str = Field(default="", max_length=200)
    city_hint: str = Field(default="", max_length=100)
    departure_ms: Optional[int] = Field(default=None, ge=0)


class PlanResponse(BaseModel):
    recommendations: list[Recommendation]
    degraded: bool = False
    warnings: list[str] = Field(default_factory=list)
    source_reports: list[SourceReport] = Field(default_factory=list)
    trace_id: str = ""


class RankRequest(BaseModel):
    itineraries: list[Itinerary] = Field(min_length=1, max_length=100)
    preferences: Optional[Preferences] = None


class RankResponse(BaseModel):
    recommendations: list[Recommendation]


class LearnRequest(BaseModel):
    selected: Itinerary
    candidates: list[Itinerary] = Field(default_factory=list, max_length=100)


class LearnResponse(BaseModel):
    preferences: Preferences
    message: str
    adjusted: bool
