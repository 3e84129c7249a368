"""Fixed comfort coefficients per transport mode."""

from __future__ import annotations

from tripmesh.domain.constants import COMFORT_BY_MODE, DEFAULT_COMFORT
from tripmesh.domain.enums import TransportMode


def comfort_for(mode: TransportMode | str) -> float:
    try:
        key = TransportMode(str(getattr(mode, "value", mode)).upper())
    except ValueError:
        return DEFAULT_COMFORT
    return COMFORT_BY_MODE.get(key, DEFAULT_COMFORT)


__all__ = ["comfort_for"]
