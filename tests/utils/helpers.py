"""Test helper functions."""

import json
from contextlib import contextmanager
from typing import Dict, Any
from unittest.mock import MagicMock, patch


def create_vercel_request(
    method: str = "POST",
    path: str = "/api/imports/preview",
    body: Dict[str, Any] = None,
    headers: Dict[str, str] = None
) -> Dict[str, Any]:
    """Create a Vercel request object for testing."""
    if body is None:
        body = {}

    if headers is None:
        headers = {
            "content-type": "application/json"
        }

    return {
        "method": method,
        "path": path,
        "headers": headers,
        "body": json.dumps(body),
        "query": {}
    }


def response_json(response: Dict[str, Any]) -> Dict[str, Any]:
    return json.loads(response["body"])


@contextmanager
def patched_supabase(module_path: str, query: MagicMock):
    """Patch SupabaseClient in a module so every table() returns the given query double."""
    client = MagicMock()
    client.table.return_value = query
    with patch(f"{module_path}.SupabaseClient") as mock_client_class:
        mock_client_class.return_value.__aenter__.return_value = client
        mock_client_class.return_value.__aexit__.return_value = None
        yield client
