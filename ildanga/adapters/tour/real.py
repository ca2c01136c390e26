"""한국관광공사 TourAPI 어댑터 (KorService2)

환경변수: TOUR_API_KEY (공공데이터포털 일반 인증키, 디코딩 값)
문서: https://www.data.go.kr/data/15101578/openapi.do

TourAPI는 _type=json 을 요청해도 인증/한도 오류를 XML 로 돌려준다.
그래서 본문을 먼저 문자열로 받아 XML 표식을 확인한 뒤에 JSON 으로 파싱한다.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ildanga.adapters.results import ProxyResult, SetupGuide, failure_from_exception
from ildanga.config.settings import get_settings
from ildanga.domain.models import AreaCode, Attraction
from ildanga.infrastructure.logging import get_logger
from ildanga.security.http_client import SecureHttpClient
from ildanga.security.key_manager import get_key_manager
from ildanga.shared.exceptions import InvalidRequestError, KeyMissingError, UpstreamApiError, UpstreamParseError

TOURIST_SPOT_TYPE = "12"
_RESULT_OK = "0000"
_XML_MARKERS = ("<OpenAPI_ServiceResponse>", "<resultCode>")
_AUTH_MSG_RE = re.compile(r"<returnAuthMsg>([^<]+)</returnAuthMsg>")

TOUR_GUIDE = SetupGuide(
    title="🔑 TourAPI 인증키 발급 방법",
    steps=[
        "1. www.data.go.kr 접속 후 로그인",
        '2. "한국관광공사_국문 관광정보 서비스_GW" 검색',
        '3. "활용신청" 클릭 후 신청서 제출',
        "4. 마이페이지 → 개발계정에서 일반 인증키(Decoding) 복사",
        "5. .env 파일에 TOUR_API_KEY=키값 추가",
    ],
    url="https://www.data.go.kr/data/15101578/openapi.do",
)
_MISSING_KEY_MESSAGE = "TourAPI 키가 설정되지 않았습니다."

_http = SecureHttpClient(tool_name="tour_api")


def _safe_str(val: object, default: str = "") -> str:
    if isinstance(val, str):
        return val
    if val is None:
        return default
    return str(val)


def _safe_float(val: object) -> float:
    try:
        return float(val)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


# ── 업스트림 응답 스키마 ──────────────────────────────────

class _TourItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    contentid: str = ""
    contenttypeid: str = ""
    title: str = ""
    addr1: str = ""
    addr2: str = ""
    tel: str = ""
    firstimage: str = ""
    firstimage2: str = ""
    mapx: str = ""
    mapy: str = ""
    overview: str = ""
    homepage: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _safe_str(value)


class _AreaCodeItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    rnum: int = 0
    code: str
    name: str

    @field_validator("code", "name", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _safe_str(value)

    @field_validator("rnum", mode="before")
    @classmethod
    def _coerce_rnum(cls, value: object) -> int:
        try:
            return int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0


class _TourHeader(BaseModel):
    model_config = ConfigDict(extra="ignore")

    resultCode: str = ""
    resultMsg: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _safe_str(value)


class _TourBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: Any = None
    totalCount: int = 0

    @field_validator("totalCount", mode="before")
    @classmethod
    def _coerce_count(cls, value: object) -> int:
        try:
            return int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0


class _TourEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    header: Optional[_TourHeader] = None
    body: Optional[_TourBody] = None


class _TourResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    response: Optional[_TourEnvelope] = None
    resultCode: Optional[str] = None
    resultMsg: Optional[str] = None

    def raw_items(self) -> list[dict[str, Any]]:
        """``items.item`` is a list, a single object, or absent ("" when empty)."""
        body = self.response.body if self.response else None
        if body is None or not isinstance(body.items, dict):
            return []
        item = body.items.get("item")
        if isinstance(item, list):
            return [i for i in item if isinstance(i, dict)]
        if isinstance(item, dict):
            return [item]
        return []

    @property
    def total_count(self) -> int:
        body = self.response.body if self.response else None
        return body.totalCount if body else 0


def _looks_like_xml(text: str) -> bool:
    stripped = text.lstrip()
    return stripped.startswith("<?xml") or any(marker in text for marker in _XML_MARKERS)


def parse_tour_response(text: str) -> _TourResponse:
    """Turn a raw TourAPI body into a validated envelope or raise.

    XML bodies raise ``UpstreamApiError`` with the auth message; anything that
    is not valid JSON of the expected shape raises ``UpstreamParseError``.
    """
    if _looks_like_xml(text):
        get_logger().error("tour_api", f"TourAPI XML 오류 응답: {text[:500]}")
        match = _AUTH_MSG_RE.search(text)
        message = match.group(1) if match else "API 인증 오류"
        raise UpstreamApiError(f"TourAPI 오류: {message}")

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        get_logger().error("tour_api", f"JSON 파싱 오류: {text[:300]}")
        raise UpstreamParseError("TourAPI 응답 JSON 파싱 실패") from None

    try:
        parsed = _TourResponse.model_validate(data)
    except ValidationError as exc:
        raise UpstreamParseError(str(exc)) from None

    if parsed.resultCode and parsed.resultCode != _RESULT_OK:
        raise UpstreamApiError(f"TourAPI 오류: {parsed.resultMsg or parsed.resultCode}")
    header = parsed.response.header if parsed.response else None
    if header is not None and header.resultCode and header.resultCode != _RESULT_OK:
        raise UpstreamApiError(f"TourAPI 오류: {header.resultMsg or header.resultCode}")
    return parsed


def _item_to_attraction(raw: dict[str, Any]) -> Attraction:
    item = _TourItem.model_validate(raw)
    return Attraction(
        id=item.contentid,
        content_id=item.contentid,
        content_type_id=item.contenttypeid,
        title=item.title,
        addr1=item.addr1,
        addr2=item.addr2,
        tel=item.tel,
        first_image=item.firstimage,
        first_image2=item.firstimage2,
        mapx=_safe_float(item.mapx),
        mapy=_safe_float(item.mapy),
        overview=item.overview,
        homepage=item.homepage,
    )


def _get_service_key() -> str:
    return get_key_manager().get_tour_key(required=True)


def _fetch(operation: str, params: dict[str, Any]) -> _TourResponse:
    settings = get_settings()
    query = {
        "serviceKey": _get_service_key(),
        "MobileOS": "ETC",
        "MobileApp": settings.tour_mobile_app,
        "_type": "json",
        **params,
    }
    text = _http.get_text(f"{settings.tour_base_url}/{operation}", params=query)
    return parse_tour_response(text)


def _attraction_result(response: _TourResponse) -> ProxyResult:
    try:
        items = [_item_to_attraction(raw).to_json_dict() for raw in response.raw_items()]
    except ValidationError as exc:
        raise UpstreamParseError(str(exc)) from None
    return ProxyResult.ok_items(items, total_count=response.total_count if items else 0)


def _fail(exc: Exception) -> ProxyResult:
    return failure_from_exception(exc, guide=TOUR_GUIDE, missing_key_message=_MISSING_KEY_MESSAGE)


# ── 공개 연산 ──────────────────────────────────────────

def list_attractions_by_area(
    area_code: str,
    *,
    content_type_id: str = TOURIST_SPOT_TYPE,
    page: int = 1,
    size: int = 20,
    sigungu_code: Optional[str] = None,
) -> ProxyResult:
    """지역 코드 기반 목록 (인기순, arrange=P)."""
    try:
        params: dict[str, Any] = {
            "areaCode": area_code or "",
            "contentTypeId": content_type_id or TOURIST_SPOT_TYPE,
            "numOfRows": str(size),
            "pageNo": str(page),
            "arrange": "P",
        }
        if sigungu_code:
            params["sigunguCode"] = sigungu_code
        return _attraction_result(_fetch("areaBasedList2", params))
    except Exception as exc:
        return _fail(exc)


def list_attractions_near_location(
    x: str | float,
    y: str | float,
    *,
    radius: int = 10000,
    content_type_id: str = TOURIST_SPOT_TYPE,
    rows: int = 30,
) -> ProxyResult:
    """좌표 반경 내 목록 (거리순, arrange=E). x = 경도, y = 위도."""
    try:
        _get_service_key()
        if x in (None, "") or y in (None, ""):
            raise InvalidRequestError("좌표(mapX, mapY)가 필요합니다.")
        params = {
            "mapX": str(x),
            "mapY": str(y),
            "radius": str(radius),
            "contentTypeId": content_type_id or TOURIST_SPOT_TYPE,
            "numOfRows": str(rows),
            "arrange": "E",
        }
        return _attraction_result(_fetch("locationBasedList2", params))
    except Exception as exc:
        return _fail(exc)


def search_attractions_by_keyword(
    keyword: str,
    *,
    content_type_id: Optional[str] = None,
    rows: int = 20,
) -> ProxyResult:
    try:
        params: dict[str, Any] = {"keyword": keyword or "", "numOfRows": str(rows)}
        if content_type_id:
            params["contentTypeId"] = content_type_id
        return _attraction_result(_fetch("searchKeyword2", params))
    except Exception as exc:
        return _fail(exc)


def get_attraction_detail(content_id: str) -> ProxyResult:
    try:
        params = {
            "contentId": content_id or "",
            "defaultYN": "Y",
            "firstImageYN": "Y",
            "areacodeYN": "Y",
            "catcodeYN": "Y",
            "addrinfoYN": "Y",
            "mapinfoYN": "Y",
            "overviewYN": "Y",
        }
        return _attraction_result(_fetch("detailCommon2", params))
    except Exception as exc:
        return _fail(exc)


def list_area_codes(area_code: Optional[str] = None) -> ProxyResult:
    """지역 코드 목록. area_code 를 주면 해당 시/도의 시군구 코드."""
    try:
        params: dict[str, Any] = {"numOfRows": "100"}
        if area_code:
            params["areaCode"] = area_code
        response = _fetch("areaCode2", params)
        try:
            items = [
                AreaCode(code=row.code, name=row.name, rnum=row.rnum).to_json_dict()
                for row in (_AreaCodeItem.model_validate(raw) for raw in response.raw_items())
            ]
        except ValidationError as exc:
            raise UpstreamParseError(str(exc)) from None
        return ProxyResult.ok_items(items, total_count=response.total_count if items else 0)
    except Exception as exc:
        return _fail(exc)


def configuration_failure() -> Optional[ProxyResult]:
    """The missing-key failure, or None when the TourAPI key is configured."""
    try:
        _get_service_key()
    except KeyMissingError as exc:
        return _fail(exc)
    return None
