"""Helpers shared by the serverless request handlers."""

import json
from typing import Any, Optional

from estatepulse.utils.logging_config import LoggingConfig


def json_response(status_code: int, payload: Any) -> dict:
    """Vercel-style response dict with a JSON body."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload)
    }


def parse_json_body(request: dict) -> dict:
    """Request body as a dict; raises ValueError on malformed JSON."""
    body = request.get("body") or {}
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8")
    if isinstance(body, str):
        try:
            body = json.loads(body) if body.strip() else {}
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON body: {e}")
    if not isinstance(body, dict):
        raise ValueError("JSON body must be an object")
    return body


def request_correlation_id(request: dict) -> Optional[str]:
    """Correlation ID header (case-insensitive), if the caller sent one."""
    wanted = LoggingConfig.LOG_CORRELATION_ID_HEADER.lower()
    for name, value in (request.get("headers") or {}).items():
        if name.lower() == wanted and value:
            return value
    return None
