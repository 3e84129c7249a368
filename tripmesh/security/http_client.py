"""Single outbound HTTP path for provider clients.

Wraps httpx with bounded timeouts and retries and converts every failure into
an ``AdapterFault`` whose message has been scrubbed of provider keys.
"""

from __future__ import annotations

import os
import time
from typing import Any, Optional

import httpx

from tripmesh.security.key_manager import get_key_manager
from tripmesh.shared.exceptions import AdapterFault


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class SecureHttpClient:
    def __init__(
        self,
        *,
        timeout: float = 5.0,
        max_retries: int = 0,
        tool_name: str = "http",
    ):
        timeout_cap = _env_float("TOOL_HTTP_TIMEOUT_CAP_SECONDS", 15.0)
        timeout_floor = _env_float("TOOL_HTTP_TIMEOUT_FLOOR_SECONDS", 0.5)
        retry_cap = _env_int("TOOL_HTTP_RETRY_CAP", 2)
        self._timeout = max(timeout_floor, min(float(timeout), timeout_cap))
        self._max_retries = max(0, min(int(max_retries), retry_cap))
        self._tool_name = tool_name
        self._km = get_key_manager()

    @property
    def timeout(self) -> float:
        return self._timeout

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        last_error: Optional[Exception] = None

        for attempt in range(1, self._max_retries + 2):
            try:
                resp = httpx.request(method, url, timeout=self._timeout, **kwargs)
                resp.raise_for_status()
                return resp.json()
            except httpx.HTTPStatusError as e:
                safe_msg = self._km.scrub_text(str(e))
                last_error = AdapterFault(self._tool_name, f"HTTP {e.response.status_code}: {safe_msg}")
            except httpx.TimeoutException:
                last_error = AdapterFault(self._tool_name, f"timed out after {self._timeout}s (attempt {attempt})")
            except httpx.HTTPError as e:
                safe_msg = self._km.scrub_text(str(e))
                last_error = AdapterFault(self._tool_name, f"request failed: {safe_msg}")
            except ValueError as e:
                safe_msg = self._km.scrub_text(str(e))
                last_error = AdapterFault(self._tool_name, f"malformed JSON response: {safe_msg}")

            if attempt <= self._max_retries:
                time.sleep(0.25 * attempt)

        raise last_error  # type: ignore[misc]

    def get(
        self,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        return self._request("GET", url, params=params, headers=headers)

    def post_json(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        return self._request("POST", url, json=payload, headers=headers)
