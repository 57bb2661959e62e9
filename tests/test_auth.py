# tests/test_auth.py

"""
Tests for authentication endpoints and the subscription gate.
"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from unittest.mock import Mock, patch

from core.config import settings
from dependencies.auth import CurrentUser, get_subscribed_user


def _login_response():
    session = Mock()
    session.access_token = "access-123"
    session.refresh_token = "refresh-456"
    session.expires_in = 3600
    response = Mock()
    response.session = session
    response.user = Mock(id="user-1")
    return response


def test_login_success_reports_subscription(client: TestClient):
    with patch("routers.auth.require_client") as mock_require, \
         patch("routers.auth.get_user_subscription", return_value={"subscription_status": "active"}):
        mock_client = Mock()
        mock_client.auth.sign_in_with_password.return_value = _login_response()
        mock_require.return_value = mock_client

        response = client.post(
            "/auth/login",
            json={"email": "Sindico@Example.com", "password": "secret1"},
        )

    assert response.status_code == 200
    data = response.json()
    assert data["access_token"] == "access-123"
    assert data["refresh_token"] == "refresh-456"
    assert data["subscription_active"] is True
    mock_client.auth.sign_in_with_password.assert_called_once_with(
        {"email": "sindico@example.com", "password": "secret1"}
    )


def test_login_without_subscription_still_succeeds(client: TestClient):
    with patch("routers.auth.require_client") as mock_require, \
         patch("routers.auth.get_user_subscription", return_value=None):
        mock_client = Mock()
        mock_client.auth.sign_in_with_password.return_value = _login_response()
        mock_require.return_value = mock_client

        response = client.post("/auth/login", json={"email": "a@example.com", "password": "secret1"})

    assert response.status_code == 200
    assert response.json()["subscription_active"] is False


def test_login_invalid_credentials(client: TestClient):
    with patch("routers.auth.require_client") as mock_require:
        mock_client = Mock()
        mock_client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        mock_require.return_value = mock_client

        response = client.post("/auth/login", json={"email": "a@example.com", "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_me_rejects_invalid_token(client: TestClient):
    with patch("dependencies.auth.get_supabase_client") as mock_supabase:
        mock_client = Mock()
        mock_client.auth.get_user.side_effect = Exception("invalid JWT")
        mock_supabase.return_value = mock_client

        response = client.get("/auth/me", headers={"Authorization": "Bearer bad"})

    assert response.status_code == 401
    assert response.headers.get("WWW-Authenticate") == "Bearer"


def test_me_returns_user_from_token(client: TestClient):
    with patch("dependencies.auth.get_supabase_client") as mock_supabase:
        auth_user = Mock(id="user-1", email="sindico@example.com", user_metadata={"name": "Maria"})
        mock_client = Mock()
        mock_client.auth.get_user.return_value = Mock(user=auth_user)
        mock_supabase.return_value = mock_client

        response = client.get("/auth/me", headers={"Authorization": "Bearer good"})

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "user-1"
    assert data["name"] == "Maria"
    assert "access_token" not in data


def test_logout_revokes_session(auth_client: TestClient):
    with patch("routers.auth.require_client") as mock_require:
        mock_client = Mock()
        mock_require.return_value = mock_client

        response = auth_client.post("/auth/logout")

    assert response.status_code == 200
    mock_client.auth.admin.sign_out.assert_called_once_with("test-token")


def test_password_reset_rate_limiting(client: TestClient):
    with patch("routers.auth.require_client") as mock_require:
        mock_client = Mock()
        mock_require.return_value = mock_client

        for _ in range(5):
            response = client.post("/auth/password-reset", json={"email": "a@example.com"})
            assert response.status_code == 200

        response = client.post("/auth/password-reset", json={"email": "a@example.com"})

    assert response.status_code == 429
    assert response.headers.get("Retry-After") == "900"


def test_login_rate_limited_per_email(client: TestClient):
    with patch("routers.auth.require_client") as mock_require:
        mock_client = Mock()
        mock_client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        mock_require.return_value = mock_client

        for _ in range(10):
            response = client.post("/auth/login", json={"email": "a@example.com", "password": "wrong"})
            assert response.status_code == 401

        blocked = client.post("/auth/login", json={"email": "A@example.com", "password": "wrong"})
        other = client.post("/auth/login", json={"email": "b@example.com", "password": "wrong"})

    assert blocked.status_code == 429
    assert blocked.headers.get("Retry-After") == "300"
    assert other.status_code == 401


def test_password_reset_hides_failures(client: TestClient):
    with patch("routers.auth.require_client") as mock_require:
        mock_client = Mock()
        mock_client.auth.reset_password_for_email.side_effect = Exception("User not found")
        mock_require.return_value = mock_client

        response = client.post("/auth/password-reset", json={"email": "nobody@example.com"})

    assert response.status_code == 200
    assert response.json()["success"] is True


# ============================================================
# Subscription gate
# ============================================================
@pytest.fixture
def user():
    return CurrentUser(id="user-1", email="a@example.com")


@pytest.mark.parametrize("status", ["active", "trialing"])
def test_subscribed_user_allowed(user, status):
    with patch("dependencies.auth.get_user_subscription", return_value={"subscription_status": status}):
        assert get_subscribed_user(user) is user


@pytest.mark.parametrize("row", [None, {"subscription_status": "not_started"}, {"subscription_status": "canceled"}])
def test_unsubscribed_user_gets_402(user, row):
    with patch("dependencies.auth.get_user_subscription", return_value=row):
        with pytest.raises(HTTPException) as exc:
            get_subscribed_user(user)

    assert exc.value.status_code == 402


def test_gate_can_be_disabled(user):
    with patch.object(settings, "SUBSCRIPTION_GATING_ENABLED", False), \
         patch("dependencies.auth.get_user_subscription") as mock_lookup:
        assert get_subscribed_user(user) is user

    mock_lookup.assert_not_called()
