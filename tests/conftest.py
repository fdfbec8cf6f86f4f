"""Shared pytest fixtures and configuration."""

import os
import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, AsyncMock, MagicMock
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LLM_PROVIDER", "anthropic")
os.environ.setdefault("LLM_MODEL", "claude-sonnet-4-20250514")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("USE_AI_FIELD_MAPPING", "false")
os.environ.setdefault("DEFAULT_AGENCY_ID", "a1")
os.environ.setdefault("LOG_FORMAT", "text")


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for testing."""
    client = Mock()
    client.table = Mock(return_value=Mock())
    return client


@pytest.fixture
def mock_query():
    """Chainable PostgREST query builder double; set .execute.return_value per test."""
    query = MagicMock()
    for method in ("select", "eq", "in_", "order", "limit", "insert", "upsert", "update", "delete"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=[])
    return query


@pytest.fixture
def mock_llm():
    """Mock LangChain chat model for testing."""
    model = MagicMock()
    model.ainvoke = AsyncMock()
    return model


@pytest.fixture
def import_context():
    """Import context with a fixed clock."""
    from estatepulse.models.csv_import import ImportContext

    return ImportContext(
        agency_id="a1",
        actor_user_id="u2",
        timestamp_source=lambda: datetime(2024, 12, 9, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def listings_csv():
    """Listing export with a quoted address and a currency-formatted price."""
    return (
        "Address,Seller,Price,Status\n"
        '"123 Main St, Apt 2","J. Smith","$450,000","Pending"\n'
        '"9 Elm Rd","K. Jones","615000","Active"\n'
    )


@pytest.fixture
def contacts_csv():
    return (
        "Name,Email,Phone,Tags\n"
        "Alice Johnson,alice@x.com,555-0199,\"vip, buyer\"\n"
        "Bob Stone,bob@y.com,,\n"
    )


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time


@pytest.fixture
def mock_vercel_request():
    """Mock Vercel serverless function request."""
    return {
        "method": "POST",
        "path": "/api/imports/preview",
        "headers": {
            "content-type": "application/json",
            "x-correlation-id": "req_test123",
        },
        "body": '{"csv": "Name\\nAlice", "entity_type": "contacts"}',
        "query": {}
    }


@pytest.fixture(scope="function")
def reset_environment(monkeypatch):
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
