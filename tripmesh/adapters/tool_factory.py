"""Concrete collaborator selection and wiring."""

from __future__ import annotations

import logging
import os
from typing import Any

from tripmesh.adapters.directions import mock as mock_directions
from tripmesh.adapters.fault_injection import wrap_tool_with_fault_injection
from tripmesh.adapters.generative import mock as mock_generative
from tripmesh.adapters.routing import mock as mock_routing
from tripmesh.security.key_manager import get_key_manager
from tripmesh.security.redact import redact_sensitive
from tripmesh.shared.exceptions import AdapterFault

_logger = logging.getLogger("tripmesh.tools")
_DEFAULT_ALLOWLIST = {"directions", "routing", "generative"}


def _has_key(name: str) -> bool:
    return get_key_manager().has_key(name)


def _strict_external_enabled() -> bool:
    value = os.getenv("STRICT_EXTERNAL_DATA", "")
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _tool_allowlist() -> set[str]:
    raw = os.getenv("TOOL_ALLOWLIST", "")
    if not raw.strip():
        return set(_DEFAULT_ALLOWLIST)
    values = {item.strip().lower() for item in raw.split(",") if item.strip()}
    return values or set(_DEFAULT_ALLOWLIST)


def _ensure_tool_allowed(tool_name: str) -> None:
    if tool_name not in _tool_allowlist():
        raise AdapterFault(tool_name, f"Tool blocked by TOOL_ALLOWLIST: {tool_name}")


def _select(tool_name: str, has_credentials: bool, load_real, fallback: Any) -> Any:
    _ensure_tool_allowed(tool_name)
    if _strict_external_enabled() and not has_credentials:
        raise AdapterFault(tool_name, "STRICT_EXTERNAL_DATA=true requires provider credentials")
    if has_credentials:
        try:
            return wrap_tool_with_fault_injection(tool_name, load_real())
        except Exception as exc:
            if _strict_external_enabled():
                raise AdapterFault(tool_name, f"Failed to load provider: {redact_sensitive(str(exc))}") from None
            _logger.warning(
                "Failed to load %s provider, fallback to mock: %s",
                tool_name,
                redact_sensitive(str(exc)),
            )
    return wrap_tool_with_fault_injection(tool_name, fallback)


def _load_real_directions():
    from tripmesh.adapters.directions import real

    return real


def _load_real_routing():
    from tripmesh.adapters.routing import real

    return real


def _load_real_generative():
    from tripmesh.adapters.generative import real

    return real


def get_directions_tool():
    return _select("directions", _has_key("GOOGLE_MAPS_API_KEY"), _load_real_directions, mock_directions)


def get_routing_tool():
    has_credentials = _has_key("ORS_API_KEY") or _has_key("LOCATIONIQ_API_KEY")
    return _select("routing", has_credentials, _load_real_routing, mock_routing)


def get_generative_tool():
    return _select("generative", _has_key("OPENAI_API_KEY"), _load_real_generative, mock_generative)


def describe_active_tools() -> dict[str, str]:
    routing_real = _has_key("ORS_API_KEY") or _has_key("LOCATIONIQ_API_KEY")
    return {
        "directions": "google" if _has_key("GOOGLE_MAPS_API_KEY") else "mock",
        "routing": "ors/locationiq" if routing_real else "mock",
        "generative": "openai" if _has_key("OPENAI_API_KEY") else "template",
        "strict_external_data": "true" if _strict_external_enabled() else "false",
    }


__all__ = [
    "get_directions_tool",
    "get_routing_tool",
    "get_generative_tool",
    "describe_active_tools",
]
