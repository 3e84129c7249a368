"""Optional collaborator fault injection for resilience drills.

Disabled by default. Enable by setting:
  ENABLE_TOOL_FAULT_INJECTION=true
  TOOL_FAULT_INJECTION=directions:timeout,generative:unavailable
  TOOL_FAULT_RATE=1.0            (share of calls that fail)
  TOOL_FAULT_HANG_SECONDS=30     (sleep used by the ``hang`` fault)
"""

from __future__ import annotations

import os
import random
import time
from dataclasses import dataclass, field
from typing import Any

from tripmesh.config.settings import float_env, is_enabled
from tripmesh.shared.exceptions import AdapterFault

_FAULT_MESSAGES = {
    "timeout": "injected timeout",
    "rate_limit": "injected upstream rate limit 429",
    "unavailable": "injected upstream unavailable 503",
    "hang": "injected hang released",
}


@dataclass(frozen=True)
class FaultPlan:
    faults: dict[str, str] = field(default_factory=dict)
    rate: float = 1.0
    hang_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "FaultPlan":
        faults: dict[str, str] = {}
        for item in os.getenv("TOOL_FAULT_INJECTION", "").split(","):
            tool, _, fault = item.partition(":")
            tool, fault = tool.strip().lower(), fault.strip().lower()
            if tool and fault in _FAULT_MESSAGES:
                faults[tool] = fault
        return cls(
            faults=faults,
            rate=min(1.0, float_env("TOOL_FAULT_RATE", 1.0, floor=0.0)),
            hang_seconds=float_env("TOOL_FAULT_HANG_SECONDS", 30.0, floor=0.0),
        )

    def trip(self, tool_name: str, operation: str) -> None:
        """Raise the configured fault for ``tool_name``, if any fires this call."""
        fault = self.faults.get(tool_name.lower())
        if fault is None or random.random() >= self.rate:
            return
        if fault == "hang":
            time.sleep(self.hang_seconds)
        raise AdapterFault(tool_name, f"{_FAULT_MESSAGES[fault]} op={operation}")


class FaultInjectedToolProxy:
    def __init__(self, tool_name: str, target: Any, plan: FaultPlan) -> None:
        self._tool_name = tool_name
        self._target = target
        self._plan = plan

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._target, name)
        if not callable(attr):
            return attr

        def _wrapped(*args: Any, **kwargs: Any):
            self._plan.trip(self._tool_name, name)
            return attr(*args, **kwargs)

        return _wrapped


def wrap_tool_with_fault_injection(tool_name: str, tool_impl: Any) -> Any:
    if not is_enabled(os.getenv("ENABLE_TOOL_FAULT_INJECTION")):
        return tool_impl
    return FaultInjectedToolProxy(tool_name, tool_impl, FaultPlan.from_env())


__all__ = ["FaultPlan", "wrap_tool_with_fault_injection"]
