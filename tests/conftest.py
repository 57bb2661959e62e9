# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, Mock
from typing import Generator

from main import create_app
from dependencies.auth import CurrentUser, get_current_user, get_subscribed_user

CHAIN_METHODS = (
    "select", "eq", "neq", "in_", "gte", "lte", "lt", "gt", "order", "limit",
    "or_", "ilike", "contains", "insert", "update", "upsert", "delete",
)


@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def mock_current_user():
    """Create a mock current user for testing."""
    return CurrentUser(
        id="user-1",
        email="sindico@example.com",
        name="Maria Síndica",
        access_token="test-token",
    )


@pytest.fixture
def auth_client(app, mock_current_user) -> Generator[TestClient, None, None]:
    """Client authenticated as mock_current_user with an active subscription."""
    app.dependency_overrides[get_current_user] = lambda: mock_current_user
    app.dependency_overrides[get_subscribed_user] = lambda: mock_current_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_query():
    """
    Factory for a chained PostgREST query mock.
    Every filter/mutation returns the same mock; execute() yields `results`
    in order (a single list means the same data every time).
    """
    def _make(*results, count=None):
        query = MagicMock()
        for name in CHAIN_METHODS:
            getattr(query, name).return_value = query

        responses = [Mock(data=r, count=count) for r in results] or [Mock(data=[], count=count)]
        if len(responses) == 1:
            query.execute.return_value = responses[0]
        else:
            query.execute.side_effect = responses
        return query

    return _make


@pytest.fixture
def make_client():
    """Factory for a Supabase client mock routing table names to query mocks."""
    def _make(tables):
        mock_client = MagicMock()
        mock_client.table.side_effect = lambda name: tables[name]
        return mock_client

    return _make


@pytest.fixture(autouse=True)
def reset_cache():
    """Reset cache and rate limits before each test."""
    from core.cache import cache_clear
    from core.rate_limiter import reset_rate_limits
    cache_clear()
    reset_rate_limits()
    yield
    cache_clear()
    reset_rate_limits()
