"""Structured JSON-line logger with secret scrubbing."""

from __future__ import annotations

import json
import sys
import time
import uuid
from typing import Any, Optional

from tripmesh.security.key_manager import get_key_manager


class StructuredLogger:
    """Writes one JSON object per event, scrubbed of known provider keys."""

    def __init__(self, trace_id: Optional[str] = None, output=None):
        self.trace_id = trace_id or uuid.uuid4().hex[:8]
        self._output = output or sys.stderr
        self._timers: dict[str, float] = {}

    def _emit(self, data: dict[str, Any]) -> None:
        data["trace_id"] = self.trace_id
        data["timestamp"] = time.time()
        line = json.dumps(data, ensure_ascii=False, default=str)
        line = get_key_manager().scrub_text(line)
        try:
            self._output.write(line + "\n")
            self._output.flush()
        except (OSError, ValueError):
            # closed or broken stream: planning must not fail because of logging
            return

    def source_start(self, source: str, **extra: Any) -> None:
        self._timers[source] = time.time()
        self._emit({"event": "source_start", "source": source, **extra})

    def source_end(self, source: str, *, status: str, count: int = 0, **extra: Any) -> None:
        start = self._timers.pop(source, time.time())
        duration_ms = round((time.time() - start) * 1000, 1)
        self._emit({
            "event": "source_end",
            "source": source,
            "status": status,
            "count": count,
            "duration_ms": duration_ms,
            **extra,
        })

    def error(self, stage: str, error: str, **extra: Any) -> None:
        self._emit({"event": "error", "stage": stage, "error": error, **extra})

    def warning(self, stage: str, message: str, **extra: Any) -> None:
        self._emit({"event": "warning", "stage": stage, "message": message, **extra})

    def summary(self, **extra: Any) -> None:
        self._emit({"event": "summary", **extra})


def get_logger(trace_id: Optional[str] = None) -> StructuredLogger:
    return StructuredLogger(trace_id=trace_id)
