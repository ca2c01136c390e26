"""보안 HTTP 클라이언트 — 모든 업스트림 호출의 단일 출구

역할:
  1. 예외 메시지 속 API 키 자동 마스킹
  2. 타임아웃 / 재시도 정책 통일 (기본값: 재시도 없음)
  3. 요청 로그 (마스킹 후)
  4. httpx 의존성 격리
"""

from __future__ import annotations

import json
import time
from typing import Any, Optional

import httpx

from ildanga.config.settings import get_settings
from ildanga.infrastructure.logging import get_logger
from ildanga.security.key_manager import get_key_manager
from ildanga.shared.exceptions import ToolError, UpstreamParseError


class SecureHttpClient:
    """Thin httpx wrapper that never leaks credentials through errors or logs.

    Non-2xx answers are returned to the caller rather than raised: the
    upstreams used here put their error envelopes in the body, and the
    adapters need to read them.
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        max_retries: int = 0,
        tool_name: str = "http",
    ):
        self._timeout = timeout
        self._max_retries = max_retries
        self._tool_name = tool_name
        self._km = get_key_manager()

    @property
    def timeout(self) -> float:
        """명시값이 없으면 HTTP_TIMEOUT_SECONDS 설정을 따른다."""
        return self._timeout if self._timeout is not None else get_settings().http_timeout_seconds

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        last_error: Optional[Exception] = None
        timeout = self.timeout

        for attempt in range(1, self._max_retries + 2):
            get_logger().tool_call(
                self._tool_name,
                method=method,
                url=self._km.scrub_text(url),
                attempt=attempt,
            )
            try:
                return httpx.request(
                    method,
                    url,
                    params=params,
                    headers=headers,
                    json=json_body,
                    timeout=timeout,
                )
            except httpx.TimeoutException:
                last_error = ToolError(self._tool_name, f"요청 시간 초과 ({timeout}s), {attempt}번째 시도")
            except httpx.HTTPError as e:
                safe_msg = self._km.scrub_text(str(e))
                last_error = ToolError(self._tool_name, f"네트워크 요청 실패: {safe_msg}")

            if attempt <= self._max_retries:
                time.sleep(0.5 * attempt)

        raise last_error  # type: ignore[misc]

    def get_text(
        self,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> str:
        """GET and return the raw body text, whatever the content type."""
        return self._send("GET", url, params=params, headers=headers).text

    def get_json(
        self,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        resp = self._send("GET", url, params=params, headers=headers)
        return self._decode(resp)

    def post_json(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        resp = self._send("POST", url, headers=headers, json_body=payload)
        return self._decode(resp)

    def _decode(self, resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except (json.JSONDecodeError, ValueError):
            snippet = self._km.scrub_text(resp.text[:300])
            get_logger().warning(self._tool_name, f"JSON 파싱 실패 (HTTP {resp.status_code}): {snippet}")
            raise UpstreamParseError(f"[{self._tool_name}] 응답 JSON 파싱 실패") from None
