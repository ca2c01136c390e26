"""Gemini 어댑터 — 선택한 여행 정보로 AI 여행 일정 생성

환경변수: GEMINI_API_KEY, GEMINI_MODEL (선택)
문서: https://ai.google.dev/api/generate-content

생성된 텍스트는 검사하지 않고 그대로 돌려준다.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from ildanga.adapters.results import ProxyResult, SetupGuide, failure_from_exception
from ildanga.config.settings import get_settings
from ildanga.domain.models import PlanBrief
from ildanga.infrastructure.logging import get_logger
from ildanga.nlg.prompt_builder import build_generation_prompt
from ildanga.security.http_client import SecureHttpClient
from ildanga.security.key_manager import get_key_manager
from ildanga.shared.exceptions import InvalidRequestError, KeyMissingError, UpstreamApiError, UpstreamParseError

GENERATION_CONFIG = {"temperature": 0.7, "maxOutputTokens": 4096}

GEMINI_GUIDE = SetupGuide(
    title="🔑 Gemini API 키 발급 방법",
    steps=[
        "1. aistudio.google.com 접속",
        "2. Google 계정으로 로그인",
        '3. 좌측 메뉴에서 "Get API key" 클릭',
        '4. "Create API key" 클릭',
        "5. 생성된 API 키 복사",
        "6. .env 파일에 GEMINI_API_KEY=키값 추가",
    ],
    url="https://aistudio.google.com/app/apikey",
)
_MISSING_KEY_MESSAGE = "Gemini API 키가 설정되지 않았습니다."
_FAILURE_MESSAGE = "AI 일정 생성 중 오류가 발생했습니다"

# Gemini 응답은 20초를 넘기는 경우가 잦다.
_http = SecureHttpClient(tool_name="gemini", timeout=60.0)


class _Part(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: Optional[str] = None


class _Content(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parts: list[_Part] = []


class _Candidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: Optional[_Content] = None


class _GeminiError(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: Optional[int] = None
    message: Optional[str] = None
    status: Optional[str] = None


class _GeminiResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    candidates: list[_Candidate] = []
    error: Optional[_GeminiError] = None

    def first_text(self) -> str:
        if not self.candidates:
            return ""
        content = self.candidates[0].content
        if content is None or not content.parts:
            return ""
        return content.parts[0].text or ""


def _get_api_key() -> str:
    return get_key_manager().get_gemini_key(required=True)


def _coerce_brief(
    destination: Any,
    duration: Any,
    attractions: Any,
    restaurants: Any,
) -> PlanBrief:
    try:
        return PlanBrief.model_validate({
            "destination": destination,
            "duration": duration,
            "attractions": attractions or [],
            "restaurants": restaurants or [],
        })
    except ValidationError as exc:
        raise InvalidRequestError(f"요청 본문이 올바르지 않습니다: {exc.error_count()}개 항목 오류") from None


def _call_gemini(prompt: str) -> str:
    settings = get_settings()
    url = f"{settings.gemini_base_url}/{settings.gemini_model}:generateContent"
    payload = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": GENERATION_CONFIG,
    }
    data = _http.post_json(url, payload=payload, headers={"x-goog-api-key": _get_api_key()})

    try:
        parsed = _GeminiResponse.model_validate(data)
    except ValidationError as exc:
        raise UpstreamParseError(str(exc)) from None

    if parsed.error is not None:
        get_logger().error("gemini", f"Gemini API 오류: {parsed.error.model_dump()}")
        raise UpstreamApiError(parsed.error.message or _FAILURE_MESSAGE, details=parsed.error.model_dump())
    return parsed.first_text()


def _fail(exc: Exception) -> ProxyResult:
    return failure_from_exception(
        exc,
        guide=GEMINI_GUIDE,
        missing_key_message=_MISSING_KEY_MESSAGE,
        transport_message=_FAILURE_MESSAGE,
        semantic_status=500,
        parse_status=500,
        with_items=False,
    )


def generate_plan_from_brief(brief: PlanBrief) -> ProxyResult:
    """Ask Gemini for a plan. ``success`` only confirms non-empty text came back."""
    try:
        _get_api_key()
        text = _call_gemini(build_generation_prompt(brief))
        if not text.strip():
            raise UpstreamApiError("AI 응답에 일정 텍스트가 없습니다")
        return ProxyResult.ok_plan(text)
    except Exception as exc:
        return _fail(exc)


def generate_plan_text(
    destination: Any,
    duration: Any,
    attractions: Any = None,
    restaurants: Any = None,
) -> ProxyResult:
    try:
        _get_api_key()
        brief = _coerce_brief(destination, duration, attractions, restaurants)
    except Exception as exc:
        return _fail(exc)
    return generate_plan_from_brief(brief)


def configuration_failure() -> Optional[ProxyResult]:
    try:
        _get_api_key()
    except KeyMissingError as exc:
        return _fail(exc)
    return None
