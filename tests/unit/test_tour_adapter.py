"""TourAPI adapter: XML sniffing, envelope parsing, item shapes."""

from __future__ import annotations

import json

import pytest

from ildanga.adapters.tour import real
from ildanga.adapters.tour.real import (
    TOUR_GUIDE,
    get_attraction_detail,
    list_area_codes,
    list_attractions_by_area,
    list_attractions_near_location,
    parse_tour_response,
    search_attractions_by_keyword,
)
from ildanga.shared.exceptions import UpstreamApiError, UpstreamParseError

_ITEM = {
    "contentid": "126508",
    "contenttypeid": "12",
    "title": "경포대",
    "addr1": "강원특별자치도 강릉시 경포로 365",
    "addr2": "",
    "tel": "",
    "firstimage": "http://tong.visitkorea.or.kr/cms/resource/76/2665276_image2_1.jpg",
    "firstimage2": "",
    "mapx": "128.8966",
    "mapy": "37.7954",
}

_XML_ERROR = (
    "<OpenAPI_ServiceResponse><cmmMsgHeader><errMsg>SERVICE ERROR</errMsg>"
    "<returnAuthMsg>SERVICE_KEY_IS_NOT_REGISTERED_ERROR</returnAuthMsg>"
    "<returnReasonCode>30</returnReasonCode></cmmMsgHeader></OpenAPI_ServiceResponse>"
)


def _envelope(items, total=None) -> str:
    body = {"items": items, "numOfRows": 30, "pageNo": 1}
    if total is not None:
        body["totalCount"] = total
    return json.dumps({
        "response": {
            "header": {"resultCode": "0000", "resultMsg": "OK"},
            "body": body,
        }
    }, ensure_ascii=False)


@pytest.fixture
def tour_key(monkeypatch):
    monkeypatch.setenv("TOUR_API_KEY", "tour-test-key-5678")


@pytest.fixture
def upstream(monkeypatch):
    state = {"body": _envelope({"item": [_ITEM]}, total=1), "calls": []}

    def fake_get_text(url, *, params=None, headers=None):
        state["calls"].append({"url": url, "params": params})
        return state["body"]

    monkeypatch.setattr(real._http, "get_text", fake_get_text)
    return state


class TestParse:
    def test_xml_error_body(self):
        with pytest.raises(UpstreamApiError) as exc_info:
            parse_tour_response(_XML_ERROR)
        assert str(exc_info.value) == "TourAPI 오류: SERVICE_KEY_IS_NOT_REGISTERED_ERROR"

    def test_xml_without_auth_message(self):
        with pytest.raises(UpstreamApiError) as exc_info:
            parse_tour_response('<?xml version="1.0"?><response></response>')
        assert str(exc_info.value) == "TourAPI 오류: API 인증 오류"

    def test_garbage_is_parse_error(self):
        with pytest.raises(UpstreamParseError):
            parse_tour_response("Unexpected errors")

    def test_non_ok_result_code(self):
        text = json.dumps({"response": {"header": {"resultCode": "22", "resultMsg": "LIMITED_NUMBER_OF_SERVICE_REQUESTS"}}})
        with pytest.raises(UpstreamApiError, match="LIMITED_NUMBER_OF_SERVICE_REQUESTS"):
            parse_tour_response(text)

    def test_single_item_object_is_wrapped(self):
        parsed = parse_tour_response(_envelope({"item": _ITEM}, total=1))
        assert parsed.raw_items() == [_ITEM]

    def test_empty_items_string(self):
        parsed = parse_tour_response(_envelope("", total=0))
        assert parsed.raw_items() == []


def test_missing_key_returns_guide(upstream):
    result = list_attractions_near_location(128.8761, 37.7519)
    assert result.status_code == 400
    assert result.guide == TOUR_GUIDE
    assert upstream["calls"] == []


def test_location_list_request_and_mapping(tour_key, upstream):
    result = list_attractions_near_location(128.8761, 37.7519, radius=20000, rows=100)
    assert result.success
    assert result.total_count == 1
    item = result.items[0]
    assert item["id"] == "126508"
    assert item["contentId"] == "126508"
    assert item["firstImage"].endswith(".jpg")
    assert item["mapx"] == pytest.approx(128.8966)

    sent = upstream["calls"][0]
    assert sent["url"].endswith("/locationBasedList2")
    params = sent["params"]
    assert params["serviceKey"] == "tour-test-key-5678"
    assert params["_type"] == "json"
    assert params["MobileOS"] == "ETC"
    assert params["arrange"] == "E"
    assert (params["mapX"], params["mapY"]) == ("128.8761", "37.7519")
    assert (params["radius"], params["numOfRows"]) == ("20000", "100")
    assert params["contentTypeId"] == "12"


def test_location_list_requires_coordinates(tour_key, upstream):
    result = list_attractions_near_location(None, "37.75")
    assert result.status_code == 400
    assert upstream["calls"] == []


def test_xml_error_is_failure_with_status_200(tour_key, upstream):
    upstream["body"] = _XML_ERROR
    result = list_attractions_near_location(128.8, 37.7)
    assert result.success is False
    assert result.status_code == 200
    assert result.error == "TourAPI 오류: SERVICE_KEY_IS_NOT_REGISTERED_ERROR"
    assert result.items == []


def test_unparseable_body(tour_key, upstream):
    upstream["body"] = "not json at all"
    result = list_attractions_by_area("32")
    assert result.success is False
    assert result.error == "API 응답 파싱 오류"


def test_empty_result_has_zero_total(tour_key, upstream):
    upstream["body"] = _envelope("", total=0)
    result = search_attractions_by_keyword("없는관광지")
    assert result.success
    assert result.items == []
    assert result.total_count == 0


def test_area_list_and_detail_operations(tour_key, upstream):
    list_attractions_by_area("32", page=2, size=20, sigungu_code="1")
    params = upstream["calls"][-1]["params"]
    assert params["arrange"] == "P"
    assert (params["areaCode"], params["sigunguCode"], params["pageNo"]) == ("32", "1", "2")

    get_attraction_detail("126508")
    assert upstream["calls"][-1]["url"].endswith("/detailCommon2")
    assert upstream["calls"][-1]["params"]["contentId"] == "126508"


def test_area_codes(tour_key, upstream):
    upstream["body"] = _envelope({"item": [{"rnum": 1, "code": "1", "name": "서울"}, {"rnum": "2", "code": 32, "name": "강원특별자치도"}]}, total=2)
    result = list_area_codes()
    assert result.items == [
        {"code": "1", "name": "서울", "rnum": 1},
        {"code": "32", "name": "강원특별자치도", "rnum": 2},
    ]
