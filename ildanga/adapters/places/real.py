"""카카오 로컬 API 어댑터 — 키워드/카테고리 장소 검색, 주소 검색

환경변수: KAKAO_API_KEY (REST API 키)
문서: https://developers.kakao.com/docs/latest/ko/local/dev-guide
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ildanga.adapters.results import ProxyResult, SetupGuide, failure_from_exception
from ildanga.config.settings import get_settings
from ildanga.domain.models import Address, Restaurant
from ildanga.infrastructure.logging import get_logger
from ildanga.security.http_client import SecureHttpClient
from ildanga.security.key_manager import get_key_manager
from ildanga.shared.exceptions import InvalidRequestError, KeyMissingError, UpstreamApiError, UpstreamParseError

DEFAULT_RADIUS = 5000
DEFAULT_PAGE_SIZE = 15
RESTAURANT_CATEGORY = "FD6"

KAKAO_GUIDE = SetupGuide(
    title="🔑 카카오 REST API 키 발급 방법",
    steps=[
        "1. developers.kakao.com 접속",
        "2. 카카오 계정으로 로그인",
        '3. 상단 "앱" 메뉴 클릭',
        '4. "애플리케이션 추가하기" 클릭',
        "5. 앱 이름, 회사명 등 입력 후 저장",
        '6. 생성된 앱 클릭 → "앱 키"에서 REST API 키 복사',
        "7. .env 파일에 KAKAO_API_KEY=키값 추가",
    ],
    url="https://developers.kakao.com/console/app",
)
_MISSING_KEY_MESSAGE = "카카오 API 키가 설정되지 않았습니다. .env 파일에 KAKAO_API_KEY를 설정해주세요."

_http = SecureHttpClient(tool_name="kakao_local")


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

class _KakaoDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    place_name: str = ""
    category_name: str = ""
    category_group_code: str = ""
    category_group_name: str = ""
    phone: str = ""
    address_name: str = ""
    road_address_name: str = ""
    x: str = ""
    y: str = ""
    place_url: str = ""
    distance: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _safe_str(value)


class _KakaoAddressPart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    address_name: str = ""
    region_1depth_name: str = ""
    region_2depth_name: str = ""
    region_3depth_name: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _safe_str(value)


class _KakaoAddressDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    address_name: str = ""
    x: str = ""
    y: str = ""
    address: Optional[_KakaoAddressPart] = None
    road_address: Optional[_KakaoAddressPart] = None

    @field_validator("address_name", "x", "y", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _safe_str(value)

    @field_validator("address", "road_address", mode="before")
    @classmethod
    def _empty_part(cls, value: object) -> object:
        return value or None


class _KakaoResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    meta: Optional[dict[str, Any]] = None
    documents: Optional[list[dict[str, Any]]] = None


def _get_api_key() -> str:
    return get_key_manager().get_kakao_key(required=True)


def _fetch(path: str, params: dict[str, Any]) -> _KakaoResponse:
    url = f"{get_settings().kakao_base_url}{path}"
    headers = {"Authorization": f"KakaoAK {_get_api_key()}"}
    data = _http.get_json(url, params=params, headers=headers)

    if not isinstance(data, dict):
        raise UpstreamParseError("카카오 응답이 객체가 아닙니다")
    if data.get("errorType") or data.get("code"):
        get_logger().error("kakao_local", f"카카오 API 오류: {data}")
        raise UpstreamApiError(_safe_str(data.get("message")) or "API 호출 중 오류가 발생했습니다", details=data)

    try:
        return _KakaoResponse.model_validate(data)
    except ValidationError as exc:
        raise UpstreamParseError(str(exc)) from None


def _document_to_restaurant(raw: dict[str, Any]) -> Restaurant:
    doc = _KakaoDocument.model_validate(raw)
    return Restaurant(
        id=doc.id,
        place_name=doc.place_name,
        category_name=doc.category_name,
        category_group_code=doc.category_group_code,
        category_group_name=doc.category_group_name,
        phone=doc.phone,
        address_name=doc.address_name,
        road_address_name=doc.road_address_name,
        x=_safe_float(doc.x),
        y=_safe_float(doc.y),
        place_url=doc.place_url,
        distance=doc.distance,
    )


def _document_to_address(raw: dict[str, Any]) -> Address:
    doc = _KakaoAddressDocument.model_validate(raw)
    part = doc.address or _KakaoAddressPart()
    road = doc.road_address
    return Address(
        address_name=doc.address_name or part.address_name,
        road_address_name=road.address_name if road else "",
        region_1depth_name=part.region_1depth_name,
        region_2depth_name=part.region_2depth_name,
        region_3depth_name=part.region_3depth_name,
        x=_safe_float(doc.x),
        y=_safe_float(doc.y),
    )


def _place_result(response: _KakaoResponse) -> ProxyResult:
    if response.documents is None:
        return ProxyResult.ok_items([])
    try:
        items = [_document_to_restaurant(doc).to_json_dict() for doc in response.documents]
    except ValidationError as exc:
        raise UpstreamParseError(str(exc)) from None
    return ProxyResult.ok_items(items, meta=response.meta)


def _fail(exc: Exception) -> ProxyResult:
    return failure_from_exception(exc, guide=KAKAO_GUIDE, missing_key_message=_MISSING_KEY_MESSAGE)


# ── 공개 연산 ──────────────────────────────────────────

def search_places_by_keyword(
    query: str,
    *,
    x: Optional[str | float] = None,
    y: Optional[str | float] = None,
    radius: int = DEFAULT_RADIUS,
    page: int = 1,
    size: int = DEFAULT_PAGE_SIZE,
    sort: str = "accuracy",
) -> ProxyResult:
    """키워드로 장소 검색. 좌표를 둘 다 주면 반경 검색이 된다."""
    try:
        _get_api_key()
        if not (query or "").strip():
            raise InvalidRequestError("검색어(query)가 필요합니다.")
        params: dict[str, Any] = {"query": query}
        if x not in (None, "") and y not in (None, ""):
            params.update({"x": str(x), "y": str(y), "radius": str(radius)})
        params.update({"page": str(page), "size": str(size), "sort": sort})
        return _place_result(_fetch("/search/keyword.json", params))
    except Exception as exc:
        return _fail(exc)


def search_places_by_category(
    category_code: str = RESTAURANT_CATEGORY,
    *,
    x: Optional[str | float] = None,
    y: Optional[str | float] = None,
    radius: int = DEFAULT_RADIUS,
    page: int = 1,
    size: int = DEFAULT_PAGE_SIZE,
    sort: str = "distance",
) -> ProxyResult:
    """카테고리 그룹 코드로 좌표 주변 장소 검색 (FD6 = 음식점)."""
    try:
        _get_api_key()
        if x in (None, "") or y in (None, ""):
            raise InvalidRequestError("좌표(x, y)가 필요합니다.")
        params = {
            "category_group_code": category_code or RESTAURANT_CATEGORY,
            "x": str(x),
            "y": str(y),
            "radius": str(radius),
            "page": str(page),
            "size": str(size),
            "sort": sort,
        }
        return _place_result(_fetch("/search/category.json", params))
    except Exception as exc:
        return _fail(exc)


def _address_result(response: _KakaoResponse) -> ProxyResult:
    try:
        items = [_document_to_address(doc).to_json_dict() for doc in response.documents or []]
    except ValidationError as exc:
        raise UpstreamParseError(str(exc)) from None
    return ProxyResult.ok_items(items, meta=response.meta)


def search_address(query: str) -> ProxyResult:
    try:
        _get_api_key()
        if not (query or "").strip():
            raise InvalidRequestError("검색어(query)가 필요합니다.")
        return _address_result(_fetch("/search/address.json", {"query": query}))
    except Exception as exc:
        return _fail(exc)


def coord_to_address(x: Optional[str | float], y: Optional[str | float]) -> ProxyResult:
    try:
        _get_api_key()
        if x in (None, "") or y in (None, ""):
            raise InvalidRequestError("좌표(x, y)가 필요합니다.")
        return _address_result(_fetch("/geo/coord2address.json", {"x": str(x), "y": str(y)}))
    except Exception as exc:
        return _fail(exc)


def configuration_failure() -> Optional[ProxyResult]:
    """The missing-key failure, or None when the Kakao key is configured."""
    try:
        _get_api_key()
    except KeyMissingError as exc:
        return _fail(exc)
    return None
