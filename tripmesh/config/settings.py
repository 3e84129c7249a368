"""Runtime settings resolved from the environment."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}
_KNOWN_SOURCES = ("direct", "single_mode", "generative", "static")


def is_enabled(value: str | None) -> bool:
    return bool(value and value.strip().lower() in _TRUTHY)


def float_env(name: str, default: float, *, floor: float = 0.1) -> float:
    raw = str(os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return max(floor, float(raw))
    except ValueError:
        return default


def resolve_plan_deadline_seconds() -> float:
    return float_env("PLAN_DEADLINE_SECONDS", 8.0)


def resolve_provider_timeout_seconds() -> float:
    return float_env("PROVIDER_TIMEOUT_SECONDS", 5.0)


def resolve_enabled_sources() -> list[str]:
    raw = str(os.getenv("PLAN_SOURCES") or "").strip().lower()
    if not raw:
        return list(_KNOWN_SOURCES)
    picked = [item.strip() for item in raw.split(",") if item.strip() in _KNOWN_SOURCES]
    return picked or list(_KNOWN_SOURCES)


def strict_external_data_enabled() -> bool:
    return is_enabled(os.getenv("STRICT_EXTERNAL_DATA"))


def dedupe_enabled() -> bool:
    raw = os.getenv("PLAN_DEDUPE")
    if raw is None:
        return True
    return is_enabled(raw)


class EngineSettings(BaseModel):
    plan_deadline_seconds: float = Field(default=8.0, gt=0)
    provider_timeout_seconds: float = Field(default=5.0, gt=0)
    enabled_sources: list[str] = Field(default_factory=lambda: list(_KNOWN_SOURCES))
    strict_external_data: bool = False
    dedupe: bool = True
    generative_count: int = Field(default=4, ge=1, le=8)


def load_settings() -> EngineSettings:
    return EngineSettings(
        plan_deadline_seconds=resolve_plan_deadline_seconds(),
        provider_timeout_seconds=resolve_provider_timeout_seconds(),
        enabled_sources=resolve_enabled_sources(),
        strict_external_data=strict_external_data_enabled(),
        dedupe=dedupe_enabled(),
    )


__all__ = [
    "EngineSettings",
    "float_env",
    "is_enabled",
    "load_settings",
    "resolve_plan_deadline_seconds",
    "resolve_provider_timeout_seconds",
    "resolve_enabled_sources",
    "strict_external_data_enabled",
]
