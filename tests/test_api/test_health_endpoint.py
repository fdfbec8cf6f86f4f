"""Tests for health check endpoint."""

import pytest
import json
from io import BytesIO
from unittest.mock import Mock
from http.server import BaseHTTPRequestHandler
from api.health import handler, health_payload


class MockSocket:
    def __init__(self, request_line: bytes):
        self.request_line = request_line

    def makefile(self, *args, **kwargs):
        return BytesIO(self.request_line)

    def sendall(self, data):
        pass

    def close(self):
        pass


def _call(method: str) -> tuple[Mock, dict]:
    h = handler(MockSocket(f"{method} /api/health HTTP/1.1\r\n\r\n".encode()), ("127.0.0.1", 8000), None)
    h.wfile = BytesIO()
    h.send_response = Mock()
    h.send_header = Mock()
    h.end_headers = Mock()

    getattr(h, f"do_{method}")()

    h.wfile.seek(0)
    return h.send_response, json.loads(h.wfile.read().decode('utf-8'))


@pytest.mark.unit
def test_health_handler_class():
    """Test that handler is a BaseHTTPRequestHandler subclass."""
    assert issubclass(handler, BaseHTTPRequestHandler)


@pytest.mark.unit
@pytest.mark.parametrize("method", ["GET", "POST"])
def test_health_request(method):
    send_response, data = _call(method)

    assert send_response.call_args[0][0] == 200
    assert data["status"] == "ok"
    assert data["service"] == "estatepulse-backend"


@pytest.mark.unit
def test_health_reports_configuration(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("USE_AI_FIELD_MAPPING", "true")

    checks = health_payload()["checks"]

    assert checks["supabase_configured"] is True
    assert checks["llm_provider"] == "openai"
    assert checks["llm_configured"] is False
    assert checks["ai_field_mapping"] is True
