from fastapi import FastAPI
from fastapi.testclient import TestClient

from ildanga.api.main import RateLimitMiddleware, SecurityHeadersMiddleware


def _limited_app(max_requests: int) -> TestClient:
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RateLimitMiddleware, max_requests=max_requests, window_seconds=60)

    @app.post("/echo")
    def echo():
        return {"ok": True}

    @app.get("/echo")
    def echo_get():
        return {"ok": True}

    return TestClient(app)


def test_post_requests_are_rate_limited():
    client = _limited_app(2)
    assert client.post("/echo").status_code == 200
    assert client.post("/echo").status_code == 200
    blocked = client.post("/echo")
    assert blocked.status_code == 429
    assert blocked.json()["success"] is False


def test_get_requests_are_not_limited():
    client = _limited_app(1)
    for _ in range(5):
        assert client.get("/echo").status_code == 200


def test_generate_plan_rejects_non_json_body(monkeypatch):
    from ildanga.api.main import app

    monkeypatch.setenv("GEMINI_API_KEY", "gemini-test-key")
    resp = TestClient(app).post(
        "/api/generate-plan", content="{not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "요청 본문은 JSON 객체여야 합니다"}
