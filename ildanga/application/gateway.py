"""Ports between the wizard and the upstream proxy.

``LocalProxyGateway`` calls the adapters in-process; ``HttpProxyGateway``
talks to a running ildanga API service, the way a browser client would.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from ildanga.adapters import places, planner, tour
from ildanga.adapters.results import ProxyResult
from ildanga.domain.models import PlanBrief
from ildanga.infrastructure.logging import get_logger


@runtime_checkable
class ProxyGateway(Protocol):
    def list_attractions_near_location(
        self, x: float, y: float, *, radius: int, rows: int
    ) -> ProxyResult: ...

    def search_places_by_keyword(
        self, query: str, *, page: int, size: int, sort: str
    ) -> ProxyResult: ...

    def generate_plan(self, brief: PlanBrief) -> ProxyResult: ...


class LocalProxyGateway:
    def list_attractions_near_location(
        self, x: float, y: float, *, radius: int, rows: int
    ) -> ProxyResult:
        return tour.list_attractions_near_location(x, y, radius=radius, rows=rows)

    def search_places_by_keyword(
        self, query: str, *, page: int, size: int, sort: str
    ) -> ProxyResult:
        return places.search_places_by_keyword(query, page=page, size=size, sort=sort)

    def generate_plan(self, brief: PlanBrief) -> ProxyResult:
        return planner.generate_plan_from_brief(brief)


class HttpProxyGateway:
    def __init__(self, base_url: str, *, client: Optional[httpx.Client] = None, timeout: float = 60.0):
        self._client = client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _call(self, method: str, path: str, **kwargs: Any) -> ProxyResult:
        try:
            resp = self._client.request(method, path, **kwargs)
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            get_logger().error("http_gateway", f"{method} {path} 실패: {exc}")
            return ProxyResult.failure("서버에 연결할 수 없습니다. 네트워크 연결을 확인해주세요.", status_code=503)
        if not isinstance(payload, dict):
            return ProxyResult.failure("API 응답 파싱 오류", status_code=resp.status_code)
        return ProxyResult.from_payload(payload, status_code=resp.status_code)

    def list_attractions_near_location(
        self, x: float, y: float, *, radius: int, rows: int
    ) -> ProxyResult:
        params = {
            "action": "locationBasedList",
            "mapX": str(x),
            "mapY": str(y),
            "radius": str(radius),
            "numOfRows": str(rows),
        }
        return self._call("GET", "/api/tour", params=params)

    def search_places_by_keyword(
        self, query: str, *, page: int, size: int, sort: str
    ) -> ProxyResult:
        params = {"action": "searchKeyword", "query": query, "page": str(page), "size": str(size), "sort": sort}
        return self._call("GET", "/api/places", params=params)

    def generate_plan(self, brief: PlanBrief) -> ProxyResult:
        return self._call("POST", "/api/generate-plan", json=brief.to_json_dict())
