"""Environment-driven settings for the proxy service and the client."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from ildanga.security.key_manager import GEMINI_KEY_NAME, KAKAO_KEY_NAME, TOUR_KEY_NAME

_TRUTHY = {"1", "true", "yes", "on"}

_DEFAULT_STORAGE_PATH = Path.home() / ".ildanga" / "trip-storage.json"


def _is_enabled(value: str | None) -> bool:
    return bool(value and value.strip().lower() in _TRUTHY)


def _is_configured(value: str | None) -> bool:
    return bool(value and value.strip())


class ProxySettings(BaseModel):
    kakao_base_url: str = "https://dapi.kakao.com/v2/local"
    tour_base_url: str = "http://apis.data.go.kr/B551011/KorService2"
    tour_mobile_app: str = "Ildanga"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    gemini_model: str = "gemini-3-flash-preview"
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    trip_storage_path: Path = _DEFAULT_STORAGE_PATH
    api_base_url: Optional[str] = None
    rate_limit_max: int = 60
    rate_limit_window: int = 60
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    enable_docs: bool = False


def get_settings() -> ProxySettings:
    """Read settings from the environment on every call (tests rely on monkeypatch)."""
    return ProxySettings(
        kakao_base_url=os.getenv("KAKAO_LOCAL_BASE_URL", "https://dapi.kakao.com/v2/local"),
        tour_base_url=os.getenv("TOUR_API_BASE_URL", "http://apis.data.go.kr/B551011/KorService2"),
        tour_mobile_app=os.getenv("TOUR_MOBILE_APP", "Ildanga"),
        gemini_base_url=os.getenv(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/models"
        ),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-3-flash-preview"),
        http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "10")),
        trip_storage_path=Path(os.getenv("TRIP_STORAGE_PATH") or _DEFAULT_STORAGE_PATH),
        api_base_url=os.getenv("ILDANGA_API_BASE_URL") or None,
        rate_limit_max=int(os.getenv("RATE_LIMIT_MAX", "60")),
        rate_limit_window=int(os.getenv("RATE_LIMIT_WINDOW", "60")),
        cors_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
        enable_docs=_is_enabled(os.getenv("ENABLE_DOCS")),
    )


class ProviderSnapshot(BaseModel):
    places_configured: bool = False
    tour_configured: bool = False
    gemini_configured: bool = False
    gemini_model: str = ""


def resolve_provider_snapshot() -> ProviderSnapshot:
    return ProviderSnapshot(
        places_configured=_is_configured(os.getenv(KAKAO_KEY_NAME)),
        tour_configured=_is_configured(os.getenv(TOUR_KEY_NAME)),
        gemini_configured=_is_configured(os.getenv(GEMINI_KEY_NAME)),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-3-flash-preview"),
    )


__all__ = [
    "ProviderSnapshot",
    "ProxySettings",
    "get_settings",
    "resolve_provider_snapshot",
]
