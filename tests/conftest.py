"""pytest 전역 fixture — 테스트 환경 격리"""

import pytest


@pytest.fixture(autouse=True)
def no_real_apis(monkeypatch, tmp_path):
    """업스트림 키를 지워 실제 API 를 부르지 않게 한다"""
    monkeypatch.delenv("KAKAO_API_KEY", raising=False)
    monkeypatch.delenv("TOUR_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    monkeypatch.delenv("ILDANGA_API_BASE_URL", raising=False)
    monkeypatch.delenv("HTTP_TIMEOUT_SECONDS", raising=False)
    monkeypatch.setenv("TRIP_STORAGE_PATH", str(tmp_path / "trip-storage.json"))
    from ildanga.security.key_manager import UPSTREAM_KEY_NAMES, get_key_manager

    km = get_key_manager()
    for key_name in UPSTREAM_KEY_NAMES:
        km.reload(key_name)
    yield
