"""Structured logger tests."""

from __future__ import annotations

import io
import json

from ildanga.infrastructure.logging import StructuredLogger


def test_events_are_json_lines_with_trace_id():
    buf = io.StringIO()
    logger = StructuredLogger(trace_id="abc123", output=buf)
    logger.step_change("info", "attractions")
    logger.tool_call("tour_api", url="http://apis.data.go.kr/B551011/KorService2/locationBasedList2")

    lines = [json.loads(line) for line in buf.getvalue().splitlines()]
    assert [line["event"] for line in lines] == ["step_change", "tool_call"]
    assert lines[0]["from"] == "info"
    assert lines[0]["to"] == "attractions"
    assert all(line["trace_id"] == "abc123" for line in lines)


def test_secrets_are_scrubbed():
    buf = io.StringIO()
    logger = StructuredLogger(output=buf)
    logger.error("kakao_local", "failed: Authorization: KakaoAK abcdef0123456789")
    logger.tool_call("tour_api", url="http://apis.data.go.kr/x?serviceKey=plainsecret&_type=json")

    out = buf.getvalue()
    assert "abcdef0123456789" not in out
    assert "plainsecret" not in out
