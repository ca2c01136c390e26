"""집중식 API 키 관리자

역할:
  1. 모든 업스트림 API 키의 읽기와 캐싱을 한 곳에서 처리
  2. 로그/예외 메시지용 키 마스킹
  3. 키 접근 감사 기록

외부 API 호출 코드는 os.getenv 대신 반드시 이 모듈을 통해 키를 가져온다.
"""

from __future__ import annotations

import os
import time
from typing import Optional

from ildanga.security.redact import redact_sensitive
from ildanga.shared.exceptions import KeyMissingError

KAKAO_KEY_NAME = "KAKAO_API_KEY"
TOUR_KEY_NAME = "TOUR_API_KEY"
GEMINI_KEY_NAME = "GEMINI_API_KEY"

UPSTREAM_KEY_NAMES = (KAKAO_KEY_NAME, TOUR_KEY_NAME, GEMINI_KEY_NAME)


class _KeyEntry:
    """Metadata for a single loaded key."""

    __slots__ = ("value", "loaded_at", "source")

    def __init__(self, value: str, source: str):
        self.value = value
        self.loaded_at = time.time()
        self.source = source


class KeyManager:
    """Process-wide key registry."""

    def __init__(self):
        self._keys: dict[str, _KeyEntry] = {}
        self._access_log: list[dict] = []

    # ── 읽기 ──────────────────────────────────────────

    def get(self, name: str, *, required: bool = False) -> Optional[str]:
        """
        Return the key called ``name``.
        Cached entries win; otherwise the environment is consulted.
        """
        entry = self._keys.get(name)
        if entry is None:
            raw = os.getenv(name, "").strip()
            if raw:
                entry = _KeyEntry(value=raw, source="env")
                self._keys[name] = entry
            elif required:
                raise KeyMissingError(name)
            else:
                return None

        self._access_log.append({
            "key": name,
            "time": time.time(),
            "source": entry.source,
        })
        return entry.value

    def get_kakao_key(self, *, required: bool = True) -> str:
        return self.get(KAKAO_KEY_NAME, required=required) or ""

    def get_tour_key(self, *, required: bool = True) -> str:
        return self.get(TOUR_KEY_NAME, required=required) or ""

    def get_gemini_key(self, *, required: bool = True) -> str:
        return self.get(GEMINI_KEY_NAME, required=required) or ""

    # ── 마스킹 ──────────────────────────────────────────

    @staticmethod
    def redact(value: str) -> str:
        """Keep only the first and last four characters."""
        if not value or len(value) <= 8:
            return "****"
        return value[:4] + "****" + value[-4:]

    def scrub_text(self, text: str) -> str:
        """
        Remove every known key value from ``text``.
        Used before anything reaches a log line or an error message.
        """
        result = redact_sensitive(str(text) if text is not None else "")
        for name, entry in self._keys.items():
            if entry.value and entry.value in result:
                result = result.replace(entry.value, f"[{name}:***REDACTED***]")
        return result

    # ── 감사 ──────────────────────────────────────────

    def get_access_log(self, last_n: int = 100) -> list[dict]:
        return self._access_log[-last_n:]

    def has_key(self, name: str) -> bool:
        """Check presence without writing an audit entry."""
        if name in self._keys:
            return True
        return bool(os.getenv(name, "").strip())

    def reload(self, name: str) -> None:
        """Re-read ``name`` from the environment (rotation, tests)."""
        raw = os.getenv(name, "").strip()
        if raw:
            self._keys[name] = _KeyEntry(value=raw, source="env")
        elif name in self._keys:
            del self._keys[name]


_manager: Optional[KeyManager] = None


def get_key_manager() -> KeyManager:
    global _manager
    if _manager is None:
        _manager = KeyManager()
    return _manager
