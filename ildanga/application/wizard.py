"""여행 계획 마법사 — 단계 전이 표와 컨트롤러

단계 순서는 고정이다: 여행지 선택 → 여행 설정 → 관광지 → 맛집 → 결과.
``transition`` 은 (단계, 이벤트) → 다음 단계 의 순수 함수이고,
``WizardController`` 가 스토어와 프록시 게이트웨이를 묶어 실제 흐름을 돌린다.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from ildanga.adapters.results import ProxyResult, SetupGuide
from ildanga.application.gateway import ProxyGateway
from ildanga.application.trip_store import TripSessionStore
from ildanga.domain.catalog import get_region
from ildanga.domain.enums import TripStyle
from ildanga.domain.exceptions import WizardGuardError
from ildanga.domain.models import Attraction, DaySchedule, PlanBrief, Restaurant
from ildanga.infrastructure.logging import get_logger
from ildanga.nlg.prompt_builder import synthesize_prompt


class WizardStep(str, Enum):
    DESTINATION = "destination"
    INFO = "info"
    ATTRACTIONS = "attractions"
    RESTAURANTS = "restaurants"
    RESULT = "result"


class WizardEvent(str, Enum):
    NEXT = "next"
    BACK = "back"


STEP_LABELS = {
    WizardStep.INFO: "1. 여행 설정",
    WizardStep.ATTRACTIONS: "2. 관광지 선택",
    WizardStep.RESTAURANTS: "3. 맛집 선택",
}

_TRANSITIONS: dict[tuple[WizardStep, WizardEvent], WizardStep] = {
    (WizardStep.DESTINATION, WizardEvent.NEXT): WizardStep.INFO,
    (WizardStep.DESTINATION, WizardEvent.BACK): WizardStep.DESTINATION,
    (WizardStep.INFO, WizardEvent.NEXT): WizardStep.ATTRACTIONS,
    (WizardStep.INFO, WizardEvent.BACK): WizardStep.INFO,
    (WizardStep.ATTRACTIONS, WizardEvent.NEXT): WizardStep.RESTAURANTS,
    (WizardStep.ATTRACTIONS, WizardEvent.BACK): WizardStep.INFO,
    (WizardStep.RESTAURANTS, WizardEvent.NEXT): WizardStep.RESULT,
    (WizardStep.RESTAURANTS, WizardEvent.BACK): WizardStep.ATTRACTIONS,
    (WizardStep.RESULT, WizardEvent.NEXT): WizardStep.RESULT,
    (WizardStep.RESULT, WizardEvent.BACK): WizardStep.RESTAURANTS,
}


def transition(step: WizardStep, event: WizardEvent) -> WizardStep:
    return _TRANSITIONS[(WizardStep(step), WizardEvent(event))]


# 기간 프리셋. 0 = 직접 입력
DURATION_OPTIONS: tuple[tuple[int, str], ...] = (
    (1, "당일치기"),
    (2, "1박 2일"),
    (3, "2박 3일"),
    (4, "3박 4일"),
    (5, "4박 5일"),
    (0, "직접 입력"),
)
CUSTOM_DURATION = 0
DEFAULT_DURATION_OPTION = 2

ATTRACTION_RADIUS_M = 20000
ATTRACTION_ROWS = 100
RESTAURANT_PAGE_SIZE = 15
RESTAURANT_QUERY_SUFFIX = "맛집"
RESTAURANT_SORT = "accuracy"

ATTRACTION_LOAD_ERROR = "관광지 정보를 불러오는데 실패했습니다. 잠시 후 다시 시도해주세요."
RESTAURANT_LOAD_ERROR = "맛집 정보를 불러오는데 실패했습니다"


def parse_custom_days(text: str) -> Optional[int]:
    try:
        days = int(str(text).strip())
    except ValueError:
        return None
    return days if days > 0 else None


class WizardController:
    """Drives one planning flow against a ``TripSessionStore``.

    Candidate pools, paging and the loading/error flags are controller state,
    not trip state: they are rebuilt whenever a region is opened.
    """

    def __init__(self, store: TripSessionStore, gateway: ProxyGateway) -> None:
        self.store = store
        self.gateway = gateway
        self.step = WizardStep.DESTINATION
        self._reset_candidates()
        self.duration_option = DEFAULT_DURATION_OPTION
        self.custom_days = ""
        self.plan_text: Optional[str] = None

    def _reset_candidates(self) -> None:
        self.attractions: list[Attraction] = []
        self.restaurants: list[Restaurant] = []
        self.restaurant_page = 1
        self.has_more_restaurants = True
        self.loading = False
        self.error: Optional[str] = None
        self.guide: Optional[SetupGuide] = None

    # ── 여행지 ──────────────────────────────────────────

    def open_region(self, region_id: int) -> None:
        """Enter the planning flow for a catalog region (raises RegionNotFoundError)."""
        region = get_region(region_id)
        current = self.store.destination
        if current is None or current.id != region.id:
            self.store.set_destination(region)
        self._reset_candidates()
        self.duration_option = self.store.duration if 1 <= self.store.duration <= 5 else CUSTOM_DURATION
        self.custom_days = "" if self.duration_option else str(self.store.duration)
        self._move_to(WizardStep.INFO)

    # ── 여행 설정 ──────────────────────────────────────────

    def choose_duration_option(self, days: int) -> None:
        self.duration_option = days
        if days > 0:
            self.store.set_duration(days)
            self.custom_days = ""

    def enter_custom_days(self, text: str) -> None:
        self.custom_days = text
        parsed = parse_custom_days(text)
        if parsed is not None:
            self.store.set_duration(parsed)

    def set_trip_style(self, style: Optional[TripStyle]) -> None:
        self.store.set_trip_style(style)

    def duration_resolved(self) -> bool:
        if self.duration_option > 0:
            return True
        return parse_custom_days(self.custom_days) is not None

    def can_advance(self) -> bool:
        if self.step == WizardStep.DESTINATION:
            return self.store.destination is not None
        if self.step == WizardStep.INFO:
            return self.duration_resolved()
        return self.step != WizardStep.RESULT

    # ── 선택 ──────────────────────────────────────────

    def toggle_attraction(self, attraction: Attraction) -> bool:
        """Returns the new selection state."""
        if self.store.has_attraction(attraction.id):
            self.store.remove_attraction(attraction.id)
            return False
        self.store.add_attraction(attraction)
        return True

    def toggle_restaurant(self, restaurant: Restaurant) -> bool:
        if self.store.has_restaurant(restaurant.id):
            self.store.remove_restaurant(restaurant.id)
            return False
        self.store.add_restaurant(restaurant)
        return True

    # ── 이동 ──────────────────────────────────────────

    def next(self) -> WizardStep:
        if self.step == WizardStep.INFO and not self.duration_resolved():
            raise WizardGuardError("여행 기간을 1일 이상으로 입력해주세요.")
        if self.step == WizardStep.DESTINATION and self.store.destination is None:
            raise WizardGuardError("여행지를 먼저 선택해주세요.")
        return self._move_to(transition(self.step, WizardEvent.NEXT))

    def back(self) -> WizardStep:
        return self._move_to(transition(self.step, WizardEvent.BACK))

    def _move_to(self, target: WizardStep) -> WizardStep:
        previous, self.step = self.step, target
        if previous != target:
            get_logger().step_change(previous.value, target.value)
        self._on_enter(target)
        return self.step

    def _on_enter(self, step: WizardStep) -> None:
        if step == WizardStep.ATTRACTIONS and not self.attractions:
            self.load_attractions()
        elif step == WizardStep.RESTAURANTS and not self.restaurants:
            self.load_restaurants(1)
        elif step == WizardStep.RESULT:
            self.store.generate_schedule()

    # ── 후보 목록 로드 ──────────────────────────────────────

    def _begin_request(self) -> bool:
        if self.loading:
            return False
        self.loading = True
        self.error = None
        self.guide = None
        return True

    def _record_failure(self, result: ProxyResult, message: str) -> None:
        self.error = message
        self.guide = result.guide
        get_logger().warning("wizard", f"{message} ({result.error})")

    def load_attractions(self) -> bool:
        region = self.store.destination
        if region is None or not self._begin_request():
            return False
        try:
            result = self.gateway.list_attractions_near_location(
                region.lng, region.lat, radius=ATTRACTION_RADIUS_M, rows=ATTRACTION_ROWS
            )
            if not result.success:
                self._record_failure(result, ATTRACTION_LOAD_ERROR)
                return False
            self.attractions = [Attraction.model_validate(item) for item in result.items or []]
            return True
        finally:
            self.loading = False

    def load_restaurants(self, page: int, *, append: bool = False) -> bool:
        region = self.store.destination
        if region is None or not self._begin_request():
            return False
        try:
            result = self.gateway.search_places_by_keyword(
                f"{region.name} {RESTAURANT_QUERY_SUFFIX}",
                page=page,
                size=RESTAURANT_PAGE_SIZE,
                sort=RESTAURANT_SORT,
            )
            if not result.success:
                self._record_failure(result, f"{RESTAURANT_LOAD_ERROR}: {result.error}")
                return False
            fetched = [Restaurant.model_validate(item) for item in result.items or []]
            # 짧은 페이지 = 마지막 페이지로 간주한다 (추정치).
            self.has_more_restaurants = len(fetched) >= RESTAURANT_PAGE_SIZE
            self.restaurants = self.restaurants + fetched if append else fetched
            self.restaurant_page = page
            return True
        finally:
            self.loading = False

    def load_more_restaurants(self) -> bool:
        if not self.has_more_restaurants:
            return False
        return self.load_restaurants(self.restaurant_page + 1, append=True)

    def retry(self) -> bool:
        """Re-run the primary request of the current step."""
        if self.step == WizardStep.ATTRACTIONS:
            return self.load_attractions()
        if self.step == WizardStep.RESTAURANTS:
            if self.restaurants:
                return self.load_more_restaurants()
            return self.load_restaurants(1)
        return False

    # ── 결과 ──────────────────────────────────────────

    @property
    def schedule(self) -> list[DaySchedule]:
        return self.store.schedule

    def build_prompt(self) -> str:
        return synthesize_prompt(self.store.snapshot())

    def generate_plan(self) -> ProxyResult:
        snapshot = self.store.snapshot()
        if snapshot.destination is None:
            return ProxyResult.failure("여행지를 먼저 선택해주세요.", status_code=400, with_items=False)
        if not self._begin_request():
            return ProxyResult.failure("이미 요청을 처리 중입니다.", status_code=409, with_items=False)
        try:
            result = self.gateway.generate_plan(PlanBrief.from_session(snapshot))
            if result.success:
                self.plan_text = result.plan
            else:
                self._record_failure(result, result.error or "AI 일정 생성 중 오류가 발생했습니다")
            return result
        finally:
            self.loading = False

    def new_trip(self) -> None:
        self.store.reset_trip()
        self._reset_candidates()
        self.duration_option = DEFAULT_DURATION_OPTION
        self.custom_days = ""
        self.plan_text = None
        self._move_to(WizardStep.DESTINATION)
