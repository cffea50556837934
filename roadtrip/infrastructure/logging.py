"""結構化日誌：JSON line 格式，自動脫敏 API Key"""

from __future__ import annotations

import json
import sys
import time
import uuid
from typing import Any, Optional, TextIO

from roadtrip.security.key_manager import get_key_manager


class StructuredLogger:
    """One logger per planning request; every line carries the request trace id."""

    def __init__(self, trace_id: Optional[str] = None, output: Optional[TextIO] = None):
        self.trace_id = trace_id or uuid.uuid4().hex[:8]
        self._output = output or sys.stderr
        self._timers: dict[str, float] = {}

    def _emit(self, data: dict[str, Any]) -> None:
        data["trace_id"] = self.trace_id
        data["timestamp"] = time.time()
        line = json.dumps(data, ensure_ascii=False, default=str)
        self._output.write(get_key_manager().scrub_text(line) + "\n")
        self._output.flush()

    def stage_start(self, stage: str, **extra: Any) -> None:
        self._timers[stage] = time.monotonic()
        self._emit({"event": "stage_start", "stage": stage, **extra})

    def stage_end(self, stage: str, **extra: Any) -> None:
        start = self._timers.pop(stage, time.monotonic())
        duration_ms = round((time.monotonic() - start) * 1000, 1)
        self._emit({"event": "stage_end", "stage": stage, "duration_ms": duration_ms, **extra})

    def tool_call(self, tool: str, **extra: Any) -> None:
        self._emit({"event": "tool_call", "tool": tool, **extra})

    def warning(self, stage: str, message: str, **extra: Any) -> None:
        self._emit({"event": "warning", "stage": stage, "message": message, **extra})

    def error(self, stage: str, error: str, **extra: Any) -> None:
        self._emit({"event": "error", "stage": stage, "error": error, **extra})

    def summary(self, **extra: Any) -> None:
        self._emit({"event": "summary", **extra})
