"""OpenAI-backed itinerary generator.

Environment: OPENAI_API_KEY
Optional:    LLM_MODEL (default gpt-4o-mini), LLM_BASE_URL, LLM_TIMEOUT_SECONDS
"""

from __future__ import annotations

import json
import os
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from tripmesh.security.key_manager import get_key_manager
from tripmesh.shared.exceptions import AdapterFault
from tripmesh.tools.interfaces import GenerationInput, GenerationResult, parse_generation_payload

_DEFAULT_MODEL = "gpt-4o-mini"
_SYSTEM_PROMPT = (
    "You are a mobility planner. Produce realistic door-to-door itineraries for the given trip, "
    "including walking connections, transit (BUS, METRO, RAIL), cycling or ride-hail as appropriate. "
    'Output STRICT JSON with the schema {"itineraries":[{"id":"string(optional)","legs":'
    '[{"mode":"WALK|BUS|METRO|RAIL|BIKE|RIDE_HAIL","minutes":number,"description":"optional"}]}]}. '
    "No additional text."
)

_client: Optional[OpenAI] = None


def _get_client() -> OpenAI:
    global _client
    if _client is None:
        api_key = get_key_manager().get("OPENAI_API_KEY")
        if not api_key:
            raise AdapterFault("openai_generative", "OPENAI_API_KEY is not set")
        _client = OpenAI(
            api_key=api_key,
            base_url=os.getenv("LLM_BASE_URL") or None,
            timeout=float(os.getenv("LLM_TIMEOUT_SECONDS", "20") or 20),
            max_retries=0,
        )
    return _client


def reset_client() -> None:
    global _client
    _client = None


def build_user_prompt(params: GenerationInput) -> str:
    city = f" in {params.city_hint}" if params.city_hint else ""
    return (
        f"Trip: {params.origin_text} -> {params.destination_text}{city}\n"
        f"Distance straight-line: {params.distance_km:.1f} km\n"
        f"Preferences: time={params.weight_time}, cost={params.weight_cost}, comfort={params.weight_comfort}\n"
        f"Return {params.count} diverse options with realistic times and transfers."
    )


def _decode(content: str) -> Any:
    text = content.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        text = "\n".join(lines[1:-1] if lines[-1].strip() == "```" else lines[1:])
    try:
        return json.loads(text or "{}")
    except json.JSONDecodeError as exc:
        raise AdapterFault("openai_generative", f"response is not JSON: {exc.msg}") from None


def generate_itineraries(params: GenerationInput) -> GenerationResult:
    client = _get_client()
    try:
        resp = client.chat.completions.create(
            model=os.getenv("LLM_MODEL", _DEFAULT_MODEL),
            messages=[
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(params)},
            ],
            response_format={"type": "json_object"},
            temperature=0.3,
        )
    except OpenAIError as exc:
        safe = get_key_manager().scrub_text(str(exc))
        raise AdapterFault("openai_generative", f"{type(exc).__name__}: {safe}") from None

    content = resp.choices[0].message.content if resp.choices else ""
    return parse_generation_payload(_decode(content or ""))
