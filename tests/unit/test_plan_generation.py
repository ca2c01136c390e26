"""Gemini 일정 생성 어댑터 테스트"""

from __future__ import annotations

import pytest

from ildanga.adapters.planner import real
from ildanga.adapters.planner.real import GEMINI_GUIDE, GENERATION_CONFIG, generate_plan_text
from ildanga.shared.exceptions import ToolError

_DESTINATION = {"name": "강릉", "province": "강원특별자치도", "slogan": "바다와 커피의 도시", "highlights": ["경포대"]}


def _gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}, "finishReason": "STOP"}]}


@pytest.fixture
def gemini_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "AIzaTestKeyForUnitTests000000")


@pytest.fixture
def upstream(monkeypatch):
    state = {"reply": _gemini_reply("### 1일차: 강릉의 바다"), "calls": []}

    def fake_post_json(url, *, payload, headers=None):
        state["calls"].append({"url": url, "payload": payload, "headers": headers})
        if isinstance(state["reply"], Exception):
            raise state["reply"]
        return state["reply"]

    monkeypatch.setattr(real._http, "post_json", fake_post_json)
    return state


def test_missing_key_is_400_with_guide(upstream):
    result = generate_plan_text(_DESTINATION, 2)
    assert result.success is False
    assert result.status_code == 400
    assert result.guide == GEMINI_GUIDE
    assert upstream["calls"] == []


def test_missing_key_wins_over_bad_body(upstream):
    result = generate_plan_text(None, None)
    assert result.status_code == 400
    assert result.guide == GEMINI_GUIDE


def test_success_returns_plan_text(gemini_key, upstream):
    result = generate_plan_text(
        _DESTINATION,
        3,
        attractions=[{"title": "경포대", "addr1": "강릉시"}],
        restaurants=[{"placeName": "동화가든", "categoryName": "한식", "addressName": "강릉시"}],
    )
    assert result.success
    assert result.plan == "### 1일차: 강릉의 바다"
    assert result.to_payload() == {"success": True, "plan": "### 1일차: 강릉의 바다"}

    sent = upstream["calls"][0]
    assert sent["url"].endswith("/gemini-3-flash-preview:generateContent")
    assert sent["headers"] == {"x-goog-api-key": "AIzaTestKeyForUnitTests000000"}
    assert sent["payload"]["generationConfig"] == GENERATION_CONFIG
    prompt = sent["payload"]["contents"][0]["parts"][0]["text"]
    assert "2박 3일" in prompt
    assert "1. 동화가든 (한식) - 강릉시" in prompt


def test_model_override(gemini_key, upstream, monkeypatch):
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-flash")
    generate_plan_text(_DESTINATION, 1)
    assert "/gemini-2.5-flash:generateContent" in upstream["calls"][0]["url"]


def test_invalid_body_is_400(gemini_key, upstream):
    result = generate_plan_text({"province": "강원"}, 2)
    assert result.status_code == 400
    assert result.guide is None
    assert upstream["calls"] == []


def test_upstream_error_envelope_is_500(gemini_key, upstream):
    upstream["reply"] = {"error": {"code": 429, "message": "Resource has been exhausted", "status": "RESOURCE_EXHAUSTED"}}
    result = generate_plan_text(_DESTINATION, 2)
    assert result.success is False
    assert result.status_code == 500
    assert result.error == "Resource has been exhausted"
    assert result.details["status"] == "RESOURCE_EXHAUSTED"
    assert result.items is None


def test_empty_text_is_failure(gemini_key, upstream):
    upstream["reply"] = {"candidates": []}
    result = generate_plan_text(_DESTINATION, 2)
    assert result.success is False
    assert result.status_code == 500


def test_transport_failure(gemini_key, upstream):
    upstream["reply"] = ToolError("gemini", "요청 시간 초과 (60.0s), 1번째 시도")
    result = generate_plan_text(_DESTINATION, 2)
    assert result.status_code == 500
    assert result.error == "AI 일정 생성 중 오류가 발생했습니다"
