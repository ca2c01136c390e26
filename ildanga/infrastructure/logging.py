"""구조화 로그 — JSON line 형식, 민감 정보 마스킹 지원"""

from __future__ import annotations

import json
import sys
import time
import uuid
from typing import Any, Optional


def _get_scrubber():
    """Import lazily; key_manager imports nothing from here but http_client does."""
    try:
        from ildanga.security.key_manager import get_key_manager
        return get_key_manager()
    except Exception:
        return None


class StructuredLogger:
    """JSON-line logger with automatic credential scrubbing."""

    def __init__(self, trace_id: Optional[str] = None, output=None):
        self.trace_id = trace_id or str(uuid.uuid4())[:8]
        self._output = output or sys.stderr

    def _scrub(self, text: str) -> str:
        km = _get_scrubber()
        if km:
            return km.scrub_text(text)
        return text

    def _emit(self, data: dict[str, Any]) -> None:
        data["trace_id"] = self.trace_id
        data["timestamp"] = time.time()
        try:
            line = json.dumps(data, ensure_ascii=False, default=str)
            line = self._scrub(line)
            self._output.write(line + "\n")
            self._output.flush()
        except Exception as exc:
            try:
                fallback = {
                    "event": "logger_internal_error",
                    "trace_id": self.trace_id,
                    "timestamp": time.time(),
                    "error": str(exc),
                }
                sys.stderr.write(json.dumps(fallback, ensure_ascii=False, default=str) + "\n")
                sys.stderr.flush()
            except Exception:
                return

    def step_change(self, from_step: str, to_step: str, **extra: Any) -> None:
        self._emit({"event": "step_change", "from": from_step, "to": to_step, **extra})

    def tool_call(self, tool_name: str, **extra: Any) -> None:
        self._emit({"event": "tool_call", "tool": tool_name, **extra})

    def error(self, component: str, error: str, **extra: Any) -> None:
        safe_error = self._scrub(error)
        self._emit({"event": "error", "component": component, "error": safe_error, **extra})

    def warning(self, component: str, message: str, **extra: Any) -> None:
        safe_msg = self._scrub(message)
        self._emit({"event": "warning", "component": component, "message": safe_msg, **extra})

    def summary(self, **extra: Any) -> None:
        self._emit({"event": "summary", **extra})


_logger: Optional[StructuredLogger] = None


def get_logger(trace_id: Optional[str] = None) -> StructuredLogger:
    global _logger
    if _logger is None or (trace_id and _logger.trace_id != trace_id):
        _logger = StructuredLogger(trace_id=trace_id)
    return _logger
