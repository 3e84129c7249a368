"""Collaborator protocols and I/O schemas."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tripmesh.shared.exceptions import AdapterFault


class DirectionsInput(BaseModel):
    origin_lat: float
    origin_lon: float
    dest_lat: float
    dest_lon: float
    mode: str = "transit"
    departure_epoch_s: Optional[int] = None


class DirectionsResult(BaseModel):
    distance_m: float = Field(ge=0, allow_inf_nan=False)
    duration_s: float = Field(ge=0, allow_inf_nan=False)
    fare_value: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    fare_currency: str = ""
    transit_vehicle: str = ""


class RouteInput(BaseModel):
    origin_lat: float
    origin_lon: float
    dest_lat: float
    dest_lon: float
    profile: str = "foot"


class RouteResult(BaseModel):
    distance_m: float = Field(ge=0, allow_inf_nan=False)
    duration_s: float = Field(ge=0, allow_inf_nan=False)
    provider: str = ""


class GenerationInput(BaseModel):
    origin_text: str
    destination_text: str
    city_hint: str = ""
    distance_km: float = 0.0
    weight_time: float = 0.5
    weight_cost: float = 0.3
    weight_comfort: float = 0.2
    count: int = 4


class GeneratedLeg(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mode: str
    minutes: float = Field(default=0.0, allow_inf_nan=False)
    cost_cents: Optional[float] = Field(default=None, alias="costCents", allow_inf_nan=False)
    comfort_score: Optional[float] = Field(default=None, alias="comfortScore", allow_inf_nan=False)
    description: str = ""


class GeneratedItinerary(BaseModel):
    id: Optional[str] = None
    legs: list[GeneratedLeg] = Field(default_factory=list)


class GenerationResult(BaseModel):
    itineraries: list[GeneratedItinerary] = Field(default_factory=list)


def parse_generation_payload(payload: Any) -> GenerationResult:
    """Validate a generated payload, dropping malformed legs and empty plans."""
    if isinstance(payload, list):
        raw_items = payload
    elif isinstance(payload, dict) and isinstance(payload.get("itineraries"), list):
        raw_items = payload["itineraries"]
    else:
        return GenerationResult()

    items: list[GeneratedItinerary] = []
    for raw in raw_items:
        if not isinstance(raw, dict) or not isinstance(raw.get("legs"), list):
            continue
        legs: list[GeneratedLeg] = []
        for raw_leg in raw["legs"]:
            if not isinstance(raw_leg, dict):
                continue
            try:
                legs.append(GeneratedLeg.model_validate(raw_leg))
            except ValidationError:
                continue
        if legs:
            raw_id = raw.get("id")
            items.append(GeneratedItinerary(id=str(raw_id) if raw_id else None, legs=legs))
    return GenerationResult(itineraries=items)


@runtime_checkable
class DirectionsTool(Protocol):
    def get_directions(self, params: DirectionsInput) -> Optional[DirectionsResult]: ...


@runtime_checkable
class RoutingTool(Protocol):
    def route(self, params: RouteInput) -> Optional[RouteResult]: ...


@runtime_checkable
class GenerativeTool(Protocol):
    def generate_itineraries(self, params: GenerationInput) -> GenerationResult: ...


__all__ = [
    "DirectionsInput",
    "DirectionsResult",
    "RouteInput",
    "RouteResult",
    "GenerationInput",
    "GeneratedLeg",
    "GeneratedItinerary",
    "GenerationResult",
    "parse_generation_payload",
    "DirectionsTool",
    "RoutingTool",
    "GenerativeTool",
    "AdapterFault",
]
