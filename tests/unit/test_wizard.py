"""여행 계획 마법사 — 단계 전이, 후보 로드, 페이지네이션"""

from __future__ import annotations

import pytest

from ildanga.adapters.results import ProxyResult, SetupGuide
from ildanga.application.trip_store import TripSessionStore
from ildanga.application.wizard import (
    ATTRACTION_LOAD_ERROR,
    CUSTOM_DURATION,
    RESTAURANT_PAGE_SIZE,
    WizardController,
    WizardEvent,
    WizardStep,
    parse_custom_days,
    transition,
)
from ildanga.domain.exceptions import RegionNotFoundError, WizardGuardError
from ildanga.infrastructure.trip_repository import InMemoryTripRepository


def _attraction_payload(idx: int) -> dict:
    return {"id": f"a{idx}", "contentId": f"a{idx}", "title": f"관광지{idx}", "addr1": "강릉시", "mapx": 128.9, "mapy": 37.8}


def _restaurant_payload(idx: int) -> dict:
    return {"id": f"r{idx}", "placeName": f"식당{idx}", "categoryName": "음식점 > 한식", "addressName": "강릉시"}


class FakeGateway:
    def __init__(self, *, attractions=None, restaurant_pages=None):
        self.attraction_result = attractions or ProxyResult.ok_items([_attraction_payload(i) for i in range(3)])
        self.restaurant_pages = restaurant_pages or {}
        self.plan_result = ProxyResult.ok_plan("### 1일차: 강릉")
        self.calls: list[tuple] = []

    def list_attractions_near_location(self, x, y, *, radius, rows):
        self.calls.append(("attractions", x, y, radius, rows))
        return self.attraction_result

    def search_places_by_keyword(self, query, *, page, size, sort):
        self.calls.append(("restaurants", query, page, size, sort))
        return self.restaurant_pages.get(page, ProxyResult.ok_items([]))

    def generate_plan(self, brief):
        self.calls.append(("plan", brief.destination.name, brief.duration))
        return self.plan_result

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


def _full_page(start: int) -> ProxyResult:
    return ProxyResult.ok_items([_restaurant_payload(i) for i in range(start, start + RESTAURANT_PAGE_SIZE)])


def _wizard(gateway=None) -> WizardController:
    store = TripSessionStore(InMemoryTripRepository())
    return WizardController(store, gateway or FakeGateway())


class TestTransitions:
    @pytest.mark.parametrize(
        "step, event, expected",
        [
            (WizardStep.INFO, WizardEvent.NEXT, WizardStep.ATTRACTIONS),
            (WizardStep.ATTRACTIONS, WizardEvent.NEXT, WizardStep.RESTAURANTS),
            (WizardStep.RESTAURANTS, WizardEvent.NEXT, WizardStep.RESULT),
            (WizardStep.RESULT, WizardEvent.BACK, WizardStep.RESTAURANTS),
            (WizardStep.RESTAURANTS, WizardEvent.BACK, WizardStep.ATTRACTIONS),
            (WizardStep.ATTRACTIONS, WizardEvent.BACK, WizardStep.INFO),
            (WizardStep.INFO, WizardEvent.BACK, WizardStep.INFO),
        ],
    )
    def test_transition_table(self, step, event, expected):
        assert transition(step, event) == expected

    def test_parse_custom_days(self):
        assert parse_custom_days("4") == 4
        assert parse_custom_days(" 7 ") == 7
        assert parse_custom_days("0") is None
        assert parse_custom_days("") is None
        assert parse_custom_days("abc") is None


class TestFlow:
    def test_open_region_enters_info_with_destination(self):
        wizard = _wizard()
        wizard.open_region(1)
        assert wizard.step == WizardStep.INFO
        assert wizard.store.destination.name == "강릉"

    def test_open_unknown_region_raises(self):
        with pytest.raises(RegionNotFoundError):
            _wizard().open_region(9999)

    def test_custom_duration_guard(self):
        wizard = _wizard()
        wizard.open_region(1)
        wizard.choose_duration_option(CUSTOM_DURATION)
        wizard.enter_custom_days("")
        assert not wizard.can_advance()
        with pytest.raises(WizardGuardError):
            wizard.next()
        assert wizard.step == WizardStep.INFO

        wizard.enter_custom_days("6")
        assert wizard.store.duration == 6
        assert wizard.next() == WizardStep.ATTRACTIONS

    def test_attractions_fetched_once_with_region_coordinates(self):
        gateway = FakeGateway()
        wizard = _wizard(gateway)
        wizard.open_region(1)
        wizard.next()
        assert len(wizard.attractions) == 3
        _, x, y, radius, rows = gateway.calls[0]
        assert (x, y) == (128.8761, 37.7519)
        assert (radius, rows) == (20000, 100)

        wizard.next()
        wizard.back()
        assert wizard.step == WizardStep.ATTRACTIONS
        assert gateway.count("attractions") == 1

    def test_result_step_builds_schedule(self):
        wizard = _wizard()
        wizard.open_region(1)
        wizard.choose_duration_option(2)
        wizard.next()
        wizard.toggle_attraction(wizard.attractions[0])
        wizard.next()
        assert wizard.next() == WizardStep.RESULT
        assert len(wizard.schedule) == 2
        assert wizard.schedule[0].items[0].id == "attraction-a0"

    def test_toggle_twice_unselects(self):
        wizard = _wizard()
        wizard.open_region(1)
        wizard.next()
        first = wizard.attractions[0]
        assert wizard.toggle_attraction(first) is True
        assert wizard.toggle_attraction(first) is False
        assert wizard.store.selected_attractions == []

    def test_new_trip_returns_to_destination(self):
        wizard = _wizard()
        wizard.open_region(1)
        wizard.next()
        wizard.toggle_attraction(wizard.attractions[0])
        wizard.new_trip()
        assert wizard.step == WizardStep.DESTINATION
        assert wizard.store.destination is None
        assert wizard.attractions == []


class TestRestaurants:
    def _at_restaurants(self, gateway) -> WizardController:
        wizard = _wizard(gateway)
        wizard.open_region(1)
        wizard.next()
        wizard.next()
        return wizard

    def test_first_page_query_and_has_more(self):
        gateway = FakeGateway(restaurant_pages={1: _full_page(0)})
        wizard = self._at_restaurants(gateway)
        call = [c for c in gateway.calls if c[0] == "restaurants"][0]
        assert call == ("restaurants", "강릉 맛집", 1, RESTAURANT_PAGE_SIZE, "accuracy")
        assert len(wizard.restaurants) == RESTAURANT_PAGE_SIZE
        assert wizard.has_more_restaurants is True

    def test_short_page_ends_pagination(self):
        short = ProxyResult.ok_items([_restaurant_payload(i) for i in range(100, 104)])
        gateway = FakeGateway(restaurant_pages={1: _full_page(0), 2: short})
        wizard = self._at_restaurants(gateway)
        assert wizard.load_more_restaurants() is True
        assert len(wizard.restaurants) == RESTAURANT_PAGE_SIZE + 4
        assert wizard.restaurant_page == 2
        assert wizard.has_more_restaurants is False
        assert wizard.load_more_restaurants() is False
        assert gateway.count("restaurants") == 2

    def test_failed_page_keeps_list_and_page(self):
        failure = ProxyResult.failure("API 호출 중 오류가 발생했습니다", status_code=500)
        gateway = FakeGateway(restaurant_pages={1: _full_page(0), 2: failure})
        wizard = self._at_restaurants(gateway)
        assert wizard.load_more_restaurants() is False
        assert len(wizard.restaurants) == RESTAURANT_PAGE_SIZE
        assert wizard.restaurant_page == 1
        assert wizard.error.startswith("맛집 정보를 불러오는데 실패했습니다")

    def test_loading_gate_rejects_concurrent_requests(self):
        gateway = FakeGateway(restaurant_pages={1: _full_page(0), 2: _full_page(20)})
        wizard = self._at_restaurants(gateway)
        wizard.loading = True
        assert wizard.load_more_restaurants() is False
        assert gateway.count("restaurants") == 1


class TestFailures:
    def test_missing_key_surfaces_guide(self):
        guide = SetupGuide(title="키 발급", steps=["1. 발급"], url="https://example.com")
        failure = ProxyResult.failure("TourAPI 키가 설정되지 않았습니다.", status_code=400, guide=guide)
        wizard = _wizard(FakeGateway(attractions=failure))
        wizard.open_region(1)
        wizard.next()
        assert wizard.attractions == []
        assert wizard.error == ATTRACTION_LOAD_ERROR
        assert wizard.guide == guide
        assert wizard.loading is False

    def test_retry_after_failure(self):
        gateway = FakeGateway(attractions=ProxyResult.failure("boom", status_code=500))
        wizard = _wizard(gateway)
        wizard.open_region(1)
        wizard.next()
        gateway.attraction_result = ProxyResult.ok_items([_attraction_payload(7)])
        assert wizard.retry() is True
        assert [a.id for a in wizard.attractions] == ["a7"]
        assert wizard.error is None


class TestPlan:
    def test_generate_plan_sends_brief(self):
        gateway = FakeGateway()
        wizard = _wizard(gateway)
        wizard.open_region(1)
        wizard.choose_duration_option(3)
        result = wizard.generate_plan()
        assert result.success
        assert wizard.plan_text == "### 1일차: 강릉"
        assert ("plan", "강릉", 3) in gateway.calls

    def test_generate_plan_without_destination(self):
        result = _wizard().generate_plan()
        assert not result.success
        assert result.status_code == 400

    def test_build_prompt_mentions_region(self):
        wizard = _wizard()
        assert wizard.build_prompt() == ""
        wizard.open_region(1)
        assert wizard.build_prompt().startswith("# [강릉]")
