"""Uniform result shape returned by every proxy operation."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from ildanga.infrastructure.logging import get_logger
from ildanga.shared.exceptions import (
    InvalidRequestError,
    KeyMissingError,
    ToolError,
    UpstreamApiError,
    UpstreamParseError,
)


class SetupGuide(BaseModel):
    """Remediation steps shown verbatim when an upstream credential is missing."""

    title: str
    steps: list[str] = Field(default_factory=list)
    url: str


class ProxyResult(BaseModel):
    success: bool
    items: Optional[list[dict[str, Any]]] = None
    error: Optional[str] = None
    guide: Optional[SetupGuide] = None
    details: Optional[Any] = None
    meta: Optional[dict[str, Any]] = None
    total_count: Optional[int] = None
    plan: Optional[str] = None
    status_code: int = 200

    @classmethod
    def ok_items(
        cls,
        items: list[dict[str, Any]],
        *,
        meta: Optional[dict[str, Any]] = None,
        total_count: Optional[int] = None,
    ) -> "ProxyResult":
        return cls(success=True, items=items, meta=meta, total_count=total_count)

    @classmethod
    def ok_plan(cls, plan: str) -> "ProxyResult":
        return cls(success=True, plan=plan)

    @classmethod
    def failure(
        cls,
        error: str,
        *,
        status_code: int = 200,
        guide: Optional[SetupGuide] = None,
        details: Optional[Any] = None,
        with_items: bool = True,
    ) -> "ProxyResult":
        return cls(
            success=False,
            error=error,
            items=[] if with_items else None,
            guide=guide,
            details=details,
            status_code=status_code,
        )

    @classmethod
    def from_payload(cls, payload: dict[str, Any], *, status_code: int = 200) -> "ProxyResult":
        """Inverse of ``to_payload`` for clients talking to the HTTP proxy."""
        guide = payload.get("guide")
        return cls(
            success=bool(payload.get("success")),
            items=payload.get("items"),
            error=payload.get("error"),
            guide=SetupGuide.model_validate(guide) if isinstance(guide, dict) else None,
            details=payload.get("details"),
            meta=payload.get("meta"),
            total_count=payload.get("totalCount"),
            plan=payload.get("plan"),
            status_code=status_code,
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.error is not None:
            payload["error"] = self.error
        if self.items is not None:
            payload["items"] = self.items
        if self.meta is not None:
            payload["meta"] = self.meta
        if self.total_count is not None:
            payload["totalCount"] = self.total_count
        if self.plan is not None:
            payload["plan"] = self.plan
        if self.guide is not None:
            payload["guide"] = self.guide.model_dump()
        if self.details is not None:
            payload["details"] = self.details
        return payload


def failure_from_exception(
    exc: Exception,
    *,
    guide: Optional[SetupGuide] = None,
    missing_key_message: Optional[str] = None,
    transport_message: str = "API 호출 중 오류가 발생했습니다",
    semantic_status: int = 200,
    parse_status: int = 200,
    with_items: bool = True,
) -> ProxyResult:
    """Map the proxy error taxonomy onto a failure result.

    configuration → 400 + guide, client input → 400,
    upstream semantic → ``semantic_status``, parse → ``parse_status``,
    transport → 500.
    """
    if isinstance(exc, KeyMissingError):
        return ProxyResult.failure(
            missing_key_message or f"{exc.key_name} 키가 설정되지 않았습니다.",
            status_code=400,
            guide=guide,
            with_items=with_items,
        )
    if isinstance(exc, InvalidRequestError):
        return ProxyResult.failure(str(exc), status_code=400, with_items=with_items)
    if isinstance(exc, UpstreamParseError):
        return ProxyResult.failure("API 응답 파싱 오류", status_code=parse_status, with_items=with_items)
    if isinstance(exc, UpstreamApiError):
        return ProxyResult.failure(
            str(exc), status_code=semantic_status, details=exc.details, with_items=with_items
        )
    if isinstance(exc, ToolError):
        return ProxyResult.failure(
            transport_message, status_code=500, details=exc.message, with_items=with_items
        )
    get_logger().error("proxy", f"{type(exc).__name__}: {exc}")
    return ProxyResult.failure(transport_message, status_code=500, with_items=with_items)
