"""여행 계획 프롬프트 생성기

두 가지 문장을 만든다.
  * synthesize_prompt: 사용자가 복사해서 ChatGPT / Gemini / Claude 에 붙여넣는 요청문
  * build_generation_prompt: /api/generate-plan 이 Gemini 에 직접 보내는 지시문

둘 다 순수 함수다. 같은 입력이면 항상 같은 문자열을 돌려준다.
"""

from __future__ import annotations

from typing import Optional

from ildanga.domain.enums import TripStyle
from ildanga.domain.models import PlanBrief, TripSession

_STYLE_LABELS = {
    TripStyle.RELAXED: "여유롭게 (휴양 위주) 🌿",
    TripStyle.NORMAL: "적당히 (밸런스형) ⚖️",
    TripStyle.PACKED: "알차게 (바쁘게) 🏃‍♂️",
}
_SHORT_STYLE_LABELS = {
    TripStyle.RELAXED: "여유롭게",
    TripStyle.NORMAL: "적당히",
    TripStyle.PACKED: "알차게",
}
DEFAULT_STYLE_LABEL = "자유 여행"
NO_ATTRACTIONS = "(선택한 관광지 없음)"
NO_RESTAURANTS = "(선택한 맛집 없음)"

_REQUEST_BLOCK = """## 3. 요청 사항
위 정보를 바탕으로 다음 내용을 포함한 여행 계획 문서(Markdown)와 프레젠테이션(PPT) 구성안을 생성해주세요.

1. **상세 여행 일정표 (Markdown Table)**
   - 시간대별 최적의 동선 (이동 시간 포함)
   - 각 장소에서의 예상 체류 시간 및 활동 내용
   - 식사 시간 배분 (맛집 동선 고려)

2. **일자별 상세 가이드**
   - 각 장소 방문 시 유용한 꿀팁
   - 사진 찍기 좋은 포인트
   - 추천 메뉴 및 예산 (대략적)

3. **프레젠테이션 페이지 구성안**
   - 슬라이드 1: 표지 (제목, 기간, 컨셉)
   - 슬라이드 2: 여행 코스 요약 (지도 동선)
   - 슬라이드 3~N: 일차별 상세 일정 및 사진
   - 마지막 슬라이드: 예산 및 준비물 체크리스트"""


def style_label(style: Optional[TripStyle]) -> str:
    if style is None:
        return DEFAULT_STYLE_LABEL
    return _STYLE_LABELS[TripStyle(style)]


def short_style_label(style: Optional[TripStyle]) -> str:
    """결과 화면 부제용 ('2박 3일 • 여유롭게 여행')."""
    if style is None:
        return "자유"
    return _SHORT_STYLE_LABELS[TripStyle(style)]


def nights_and_days(duration: int) -> str:
    return f"{duration - 1}박 {duration}일"


def synthesize_prompt(session: TripSession) -> str:
    """Copyable planning request for an external assistant. Empty without a destination."""
    destination = session.destination
    if destination is None:
        return ""

    duration = session.duration
    label = style_label(session.trip_style)
    period = nights_and_days(duration)
    slogan = f'("{destination.slogan}")' if destination.slogan else ""

    attractions = "\n".join(
        f"{i}. {a.title} ({a.addr1})" for i, a in enumerate(session.selected_attractions, start=1)
    )
    restaurants = "\n".join(
        f"{i}. {r.place_name} ({r.category_name}, {r.address_name})"
        for i, r in enumerate(session.selected_restaurants, start=1)
    )

    lines = [
        f"# [{destination.name}] {period} 여행 계획 요청",
        "",
        "## 1. 여행 개요",
        f"- **여행지**: {destination.name} {slogan}",
        f"- **여행 기간**: {period}",
        f"- **여행 스타일**: {label}",
        "",
        "## 2. 선택한 장소",
        f"### 🏛️ 관광지 ({len(session.selected_attractions)}곳)",
        attractions or NO_ATTRACTIONS,
        "",
        f"### 🍽️ 맛집 ({len(session.selected_restaurants)}곳)",
        restaurants or NO_RESTAURANTS,
        "",
        _REQUEST_BLOCK,
        "",
        f"여행 스타일({label})에 맞춰서, 너무 빡빡하지 않고 즐길 수 있는 현실적인 일정으로 제안해서 작성해주세요.",
    ]
    return "\n".join(lines)


_GENERATION_FORMAT = """### 형식 요구사항:
1. **일차별 제목**: "### 1일차: [테마 제목]" 형식으로 작성
2. **타임라인**: 각 일정은 시간대별로 작성
   - 🕘 시간: **10:00 ~ 11:30** 형식으로 체류 시간 또는 활동 시간을 범위로 명시 (볼드체)
   - 📍 장소: **[장소명]** 형식
   - 🚗 이동: **11:30 이동**: [이동 수단] (약 00분 소요) 형식으로 출발 시간 명시
   - 🍚 식사: 식당 이름 및 메뉴 추천
   - 💡 팁: 유용한 팁은 별도 항목으로 작성
3. **가독성**: 긴 줄글보다는 불렛 포인트(- )를 활용하여 간결하게 작성
4. **스타일**:
   - 구분선(---, ***)은 사용하지 마세요.
   - 각 장소나 활동 사이에 빈 줄을 넣어 여백 확보
   - 중요 키워드는 **볼드체**로 강조
5. 한국어로 작성
6. Markdown 형식으로 작성

**작성 예시:**

### 1일차: 강릉의 바다와 커피 즐기기

- 🕘 **10:00 ~ 11:30** 📍 **[강문해변]**
  - 바다가 보이는 포토존에서 사진 촬영
  - 해변 산책로 걷기
  - 💡 팁: 아침 햇살이 좋을 때 사진이 가장 잘 나옵니다.

- 🚗 **11:30 이동**: 택시 이용 (약 10분 소요)

- 🕘 **11:40 ~ 12:40** 🍚 **[동화가든]**
  - 강릉의 대표 메뉴 짬뽕순두부 식사
  - 💡 팁: 웨이팅이 길 수 있으니 테이블링 앱 활용 추천

(이어서 작성)

일정은 현실적이고 여유로운 계획이 되도록 해주세요."""


def build_generation_prompt(brief: PlanBrief) -> str:
    """Gemini 에 보내는 고정 템플릿 지시문."""
    dest = brief.destination
    duration = brief.duration
    period = "당일치기" if duration == 1 else nights_and_days(duration)

    attractions = "\n".join(f"{i}. {a.title} - {a.addr1}" for i, a in enumerate(brief.attractions, start=1))
    restaurants = "\n".join(
        f"{i}. {r.place_name} ({r.category_name}) - {r.address_name}"
        for i, r in enumerate(brief.restaurants, start=1)
    )

    lines = [
        "당신은 국내 여행 전문가입니다. 아래 정보를 바탕으로 상세한 여행 계획서를 작성해주세요.",
        "",
        "## 여행 정보",
        f"- 여행지: {dest.name} ({dest.province})",
        f"- 슬로건: {dest.slogan}",
        f"- 특징: {', '.join(dest.highlights)}",
        f"- 여행 기간: {period}",
        "",
        f"## 선택한 관광지 ({len(brief.attractions)}곳)",
        attractions,
        "",
        f"## 선택한 맛집 ({len(brief.restaurants)}곳)",
        restaurants,
        "",
        "## 작성 요청",
        f"위 정보를 기반으로 {duration}일간의 상세 여행 일정을 작성해주세요.",
        "",
        _GENERATION_FORMAT,
    ]
    return "\n".join(lines)
