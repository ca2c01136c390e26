"""프롬프트 생성기 테스트"""

from __future__ import annotations

from ildanga.domain.catalog import get_region
from ildanga.domain.enums import TripStyle
from ildanga.domain.models import Attraction, PlanBrief, Restaurant, TripSession
from ildanga.nlg.prompt_builder import (
    DEFAULT_STYLE_LABEL,
    NO_ATTRACTIONS,
    NO_RESTAURANTS,
    build_generation_prompt,
    nights_and_days,
    style_label,
    synthesize_prompt,
)


def _session(**kwargs) -> TripSession:
    return TripSession(destination=get_region(1), **kwargs)


def test_no_destination_gives_empty_prompt():
    assert synthesize_prompt(TripSession()) == ""


def test_gangneung_three_days_without_selection():
    prompt = synthesize_prompt(_session(duration=3))
    assert prompt.startswith("# [강릉] 2박 3일 여행 계획 요청")
    assert "2박 3일" in prompt
    assert NO_ATTRACTIONS in prompt
    assert NO_RESTAURANTS in prompt
    assert DEFAULT_STYLE_LABEL in prompt
    assert '("바다와 커피의 도시")' in prompt


def test_selected_places_are_numbered():
    session = _session(
        duration=2,
        trip_style=TripStyle.RELAXED,
        selected_attractions=[
            Attraction(id="1", content_id="1", title="경포대", addr1="강릉시 경포로"),
            Attraction(id="2", content_id="2", title="오죽헌", addr1="강릉시 율곡로"),
        ],
        selected_restaurants=[
            Restaurant(id="9", place_name="동화가든", category_name="한식", address_name="강릉시 초당동"),
        ],
    )
    prompt = synthesize_prompt(session)
    assert "### 🏛️ 관광지 (2곳)" in prompt
    assert "1. 경포대 (강릉시 경포로)\n2. 오죽헌 (강릉시 율곡로)" in prompt
    assert "1. 동화가든 (한식, 강릉시 초당동)" in prompt
    assert style_label(TripStyle.RELAXED) in prompt
    assert NO_ATTRACTIONS not in prompt


def test_prompt_is_deterministic():
    session = _session(duration=4, trip_style=TripStyle.PACKED)
    assert synthesize_prompt(session) == synthesize_prompt(session.model_copy(deep=True))


def test_nights_and_days():
    assert nights_and_days(1) == "0박 1일"
    assert nights_and_days(5) == "4박 5일"


def test_generation_prompt_day_trip_label():
    brief = PlanBrief.from_session(_session(duration=1))
    prompt = build_generation_prompt(brief)
    assert "- 여행 기간: 당일치기" in prompt
    assert "- 여행지: 강릉 (강원특별자치도)" in prompt
    assert "1일간의 상세 여행 일정" in prompt


def test_generation_prompt_lists_highlights_and_places():
    brief = PlanBrief.model_validate({
        "destination": {"name": "전주", "province": "전북특별자치도", "slogan": "한옥과 맛의 고장", "highlights": ["경기전", "남부시장"]},
        "duration": 2,
        "attractions": [{"title": "경기전", "addr1": "전주시 완산구"}],
        "restaurants": [{"placeName": "가족회관", "categoryName": "비빔밥", "addressName": "전주시 완산구"}],
    })
    prompt = build_generation_prompt(brief)
    assert "- 여행 기간: 1박 2일" in prompt
    assert "- 특징: 경기전, 남부시장" in prompt
    assert "1. 경기전 - 전주시 완산구" in prompt
    assert "1. 가족회관 (비빔밥) - 전주시 완산구" in prompt
