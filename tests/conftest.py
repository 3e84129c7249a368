"""pytest global fixtures: keep tests offline and isolated."""

import pytest

_PROVIDER_KEYS = ("GOOGLE_MAPS_API_KEY", "ORS_API_KEY", "LOCATIONIQ_API_KEY", "OPENAI_API_KEY")
_RUNTIME_ENV = (
    "STRICT_EXTERNAL_DATA",
    "TOOL_ALLOWLIST",
    "ENABLE_TOOL_FAULT_INJECTION",
    "TOOL_FAULT_INJECTION",
    "TOOL_FAULT_RATE",
    "PLAN_SOURCES",
    "PLAN_DEDUPE",
    "PLAN_DEADLINE_SECONDS",
    "PREFERENCES_PERSISTENCE_ENABLED",
    "PREFERENCES_DB",
)


@pytest.fixture(autouse=True)
def no_real_apis(monkeypatch):
    """Strip provider keys so every collaborator falls back to its offline mock."""
    for name in _PROVIDER_KEYS + _RUNTIME_ENV:
        monkeypatch.delenv(name, raising=False)

    from tripmesh.adapters.generative.real import reset_client
    from tripmesh.api.main import set_engine
    from tripmesh.infrastructure.cache import directions_cache, route_cache
    from tripmesh.security.key_manager import get_key_manager

    km = get_key_manager()
    for name in _PROVIDER_KEYS:
        km.reload(name)
    route_cache.clear()
    directions_cache.clear()
    reset_client()
    set_engine(None)
    yield
    reset_client()
    set_engine(None)
