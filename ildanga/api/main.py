"""FastAPI 프록시 서버 — 업스트림 키는 서버에만 둔다"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Callable, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from ildanga import __version__
from ildanga.adapters import places, planner, tour
from ildanga.adapters.places.real import DEFAULT_PAGE_SIZE, DEFAULT_RADIUS, RESTAURANT_CATEGORY
from ildanga.adapters.results import ProxyResult
from ildanga.adapters.tour.real import TOURIST_SPOT_TYPE
from ildanga.api.schemas import DiagnosticsResponse, GeneratePlanRequest, HealthResponse, RegionListResponse
from ildanga.config.settings import get_settings, resolve_provider_snapshot
from ildanga.domain.catalog import find_region, load_regions, random_region
from ildanga.security.key_manager import get_key_manager
from ildanga.shared.exceptions import InvalidRequestError

_api_logger = logging.getLogger("ildanga.api")

load_dotenv()  # .env 자동 로드

_settings = get_settings()

app = FastAPI(
    title="ildanga",
    version=__version__,
    docs_url="/docs" if _settings.enable_docs else None,
    redoc_url=None,
)

_UNSUPPORTED_ACTION = "지원하지 않는 action입니다"
_INVALID_BODY = "요청 본문은 JSON 객체여야 합니다"


# ── 보안 미들웨어 ────────────────────────────────────────

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """보안 응답 헤더 추가"""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """POST 요청 빈도 제한 (단일 프로세스 메모리)"""

    def __init__(self, app, max_requests: int = 60, window_seconds: int = 60):
        super().__init__(app)
        self._max = max_requests
        self._window = window_seconds
        self._counters: dict[str, list[float]] = {}

    async def dispatch(self, request: Request, call_next):
        # AI 일정 생성만 비용이 크다
        if request.method != "POST":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        hits = [t for t in self._counters.get(client_ip, []) if now - t < self._window]
        if len(hits) >= self._max:
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": "요청이 너무 많습니다. 잠시 후 다시 시도해주세요."},
            )
        hits.append(now)
        self._counters[client_ip] = hits
        return await call_next(request)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    RateLimitMiddleware,
    max_requests=_settings.rate_limit_max,
    window_seconds=_settings.rate_limit_window,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def _respond(result: ProxyResult) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.to_payload())


def _unsupported_action(action: Optional[str]) -> JSONResponse:
    _api_logger.warning("unsupported action: %s", action)
    return _respond(ProxyResult.failure(_UNSUPPORTED_ACTION, status_code=400))


def _int_param(value: Optional[str], name: str, default: Optional[int] = None) -> Optional[int]:
    """쿼리 문자열 → 정수. 잘못된 값은 400 으로 돌려준다."""
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise InvalidRequestError(f"{name} 값이 올바르지 않습니다: {value}") from None


def _dispatch(
    action: Optional[str],
    handlers: dict[str, Callable[[], ProxyResult]],
    configuration_failure: Callable[[], Optional[ProxyResult]],
) -> JSONResponse:
    missing = configuration_failure()
    if missing is not None:
        return _respond(missing)
    handler = handlers.get(action or "")
    if handler is None:
        return _unsupported_action(action)
    try:
        return _respond(handler())
    except InvalidRequestError as exc:
        return _respond(ProxyResult.failure(str(exc), status_code=400))
    except Exception as exc:
        _safe_log_exception(f"{action} handler error", exc)
        return _respond(ProxyResult.failure("API 호출 중 오류가 발생했습니다", status_code=500))


# ── 기본 ────────────────────────────────────────────────

@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", version=__version__)


@app.get("/diagnostics", response_model=DiagnosticsResponse)
def diagnostics():
    """키 설정 여부만 노출한다 (키 값은 절대 내보내지 않음)."""
    return DiagnosticsResponse(providers=resolve_provider_snapshot(), regions=len(load_regions()))


# ── 지역 카탈로그 ────────────────────────────────────────

@app.get("/api/regions", response_model=RegionListResponse)
def list_regions():
    items = [region.to_json_dict() for region in load_regions()]
    return RegionListResponse(items=items, total_count=len(items))


@app.get("/api/regions/random")
def pick_random_region():
    return random_region().to_json_dict()


@app.get("/api/regions/{region_id}")
def region_detail(region_id: int):
    region = find_region(region_id)
    if region is None:
        return JSONResponse(status_code=404, content={"success": False, "error": "지역을 찾을 수 없습니다"})
    return region.to_json_dict()


# ── 카카오 로컬 프록시 ────────────────────────────────────

@app.get("/api/places")
def places_proxy(
    action: Optional[str] = None,
    query: Optional[str] = None,
    category: str = RESTAURANT_CATEGORY,
    x: Optional[str] = None,
    y: Optional[str] = None,
    radius: Optional[str] = None,
    page: Optional[str] = None,
    size: Optional[str] = None,
    sort: Optional[str] = None,
):
    handlers: dict[str, Callable[[], ProxyResult]] = {
        "searchKeyword": lambda: places.search_places_by_keyword(
            query or "",
            x=x,
            y=y,
            radius=_int_param(radius, "radius", DEFAULT_RADIUS),
            page=_int_param(page, "page", 1),
            size=_int_param(size, "size", DEFAULT_PAGE_SIZE),
            sort=sort or "accuracy",
        ),
        "searchCategory": lambda: places.search_places_by_category(
            category,
            x=x,
            y=y,
            radius=_int_param(radius, "radius", DEFAULT_RADIUS),
            page=_int_param(page, "page", 1),
            size=_int_param(size, "size", DEFAULT_PAGE_SIZE),
            sort=sort or "distance",
        ),
        "searchAddress": lambda: places.search_address(query or ""),
        "coord2Address": lambda: places.coord_to_address(x, y),
    }
    return _dispatch(action, handlers, places.configuration_failure)


# ── TourAPI 프록시 ──────────────────────────────────────

@app.get("/api/tour")
def tour_proxy(
    action: Optional[str] = None,
    areaCode: Optional[str] = None,
    sigunguCode: Optional[str] = None,
    contentTypeId: Optional[str] = None,
    contentId: Optional[str] = None,
    keyword: Optional[str] = None,
    mapX: Optional[str] = None,
    mapY: Optional[str] = None,
    radius: Optional[str] = None,
    numOfRows: Optional[str] = None,
    pageNo: Optional[str] = None,
):
    handlers: dict[str, Callable[[], ProxyResult]] = {
        "areaBasedList": lambda: tour.list_attractions_by_area(
            areaCode or "",
            content_type_id=contentTypeId or TOURIST_SPOT_TYPE,
            page=_int_param(pageNo, "pageNo", 1),
            size=_int_param(numOfRows, "numOfRows", 20),
            sigungu_code=sigunguCode,
        ),
        "locationBasedList": lambda: tour.list_attractions_near_location(
            mapX,
            mapY,
            radius=_int_param(radius, "radius", 10000),
            content_type_id=contentTypeId or TOURIST_SPOT_TYPE,
            rows=_int_param(numOfRows, "numOfRows", 30),
        ),
        "searchKeyword": lambda: tour.search_attractions_by_keyword(
            keyword or "", content_type_id=contentTypeId, rows=_int_param(numOfRows, "numOfRows", 20)
        ),
        "detailCommon": lambda: tour.get_attraction_detail(contentId or ""),
        "areaCode": lambda: tour.list_area_codes(areaCode),
    }
    return _dispatch(action, handlers, tour.configuration_failure)


# ── AI 일정 생성 ────────────────────────────────────────

@app.post("/api/generate-plan")
async def generate_plan(request: Request):
    """키 확인이 본문 검사보다 먼저다."""
    missing = planner.configuration_failure()
    if missing is not None:
        return _respond(missing)

    raw = await request.body()
    try:
        data = json.loads(raw) if raw.strip() else {}
    except ValueError:
        data = None
    if not isinstance(data, dict):
        return _respond(ProxyResult.failure(_INVALID_BODY, status_code=400, with_items=False))

    body = GeneratePlanRequest.model_validate(data)
    result = await run_in_threadpool(
        planner.generate_plan_text,
        body.destination,
        body.duration,
        attractions=body.attractions,
        restaurants=body.restaurants,
    )
    if not result.success:
        _api_logger.warning("generate-plan failed: %s", result.error)
    return _respond(result)


def _safe_log_exception(context: str, exc: Exception) -> None:
    """키를 가린 뒤 예외 로그 기록"""
    safe_msg = get_key_manager().scrub_text(str(exc))
    _api_logger.error(f"{context}: {safe_msg}")


def serve() -> None:
    """`ildanga-api` 진입점"""
    import uvicorn

    uvicorn.run(
        app,
        host=os.getenv("ILDANGA_HOST", "127.0.0.1"),
        port=int(os.getenv("ILDANGA_PORT", "8000")),
    )
