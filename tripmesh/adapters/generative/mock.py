"""Template itinerary generator used when no language model is configured."""

from __future__ import annotations

from tripmesh.tools.interfaces import GenerationInput, GenerationResult, parse_generation_payload

# minutes per km for the main leg of each template
_TEMPLATES = (
    ("walk-metro-walk", [("WALK", 0.0, 6.0), ("METRO", 2.0, 4.0), ("WALK", 0.0, 5.0)]),
    ("bus", [("WALK", 0.0, 4.0), ("BUS", 3.5, 6.0)]),
    ("ride-hail", [("RIDE_HAIL", 2.2, 3.0)]),
    ("bike-rail", [("BIKE", 0.0, 8.0), ("RAIL", 1.5, 5.0), ("WALK", 0.0, 4.0)]),
)


def generate_itineraries(params: GenerationInput) -> GenerationResult:
    distance = max(0.5, params.distance_km)
    items = []
    for name, legs in _TEMPLATES[: max(1, params.count)]:
        items.append(
            {
                "id": name,
                "legs": [
                    {
                        "mode": mode,
                        "minutes": round(per_km * distance + fixed, 1),
                        "description": f"{mode.lower().replace('_', ' ')} toward {params.destination_text}",
                    }
                    for mode, per_km, fixed in legs
                ],
            }
        )
    return parse_generation_payload({"itineraries": items})
