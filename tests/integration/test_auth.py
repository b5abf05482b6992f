"""Integration tests for cookie/header JWT authentication.

Validates:
  - /health is public (plain Django view, no DRF).
  - Protected DRF endpoints return 401 without or with a bad token.
  - Login sets the HTTP-only ``authToken`` cookie; the cookie alone
    authenticates later requests; logout clears it.
"""

import pytest

from modules.core.authentication import issue_access_token

pytestmark = pytest.mark.integration


class TestPublicEndpoints:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestProtectedEndpoints:
    """All DRF endpoints require a valid JWT by default (Fail Closed)."""

    def test_no_token_returns_401(self, api_client):
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401

    def test_invalid_token_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer invalid.token.here")
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401

    def test_malformed_auth_header_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Token some-token")
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401

    def test_invalid_cookie_returns_401(self, api_client):
        api_client.cookies["authToken"] = "not-a-jwt"
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401

    def test_401_includes_www_authenticate_header(self, api_client):
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401
        assert "Bearer" in response.get("WWW-Authenticate", "")

    def test_bearer_token_authenticates(self, api_client, user):
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_access_token(user)}")
        response = api_client.get("/api/v1/me")
        assert response.status_code == 200
        assert response.json() == {
            "id": user.id,
            "email": "buyer@example.com",
            "name": "buyer",
            "isAdmin": False,
        }


class TestLoginLogout:
    def test_login_sets_http_only_cookie(self, api_client, user):
        response = api_client.post(
            "/api/v1/auth/login/",
            {"email": "BUYER@example.com", "password": "testpass123"},
            format="json",
        )
        assert response.status_code == 200
        cookie = response.cookies["authToken"]
        assert cookie.value
        assert cookie["httponly"] is True
        assert cookie["samesite"] == "Strict"
        assert response.json()["user"]["email"] == "buyer@example.com"

    def test_cookie_authenticates_following_requests(self, api_client, user):
        api_client.post(
            "/api/v1/auth/login/",
            {"email": "buyer@example.com", "password": "testpass123"},
            format="json",
        )
        response = api_client.get("/api/v1/me")
        assert response.status_code == 200
        assert response.json()["id"] == user.id

    def test_staff_flag_is_reported(self, api_client, staff_user):
        api_client.post(
            "/api/v1/auth/login/",
            {"email": "staff@example.com", "password": "testpass123"},
            format="json",
        )
        assert api_client.get("/api/v1/me").json()["isAdmin"] is True

    @pytest.mark.parametrize(
        "credentials",
        [
            {"email": "buyer@example.com", "password": "wrong"},
            {"email": "nobody@example.com", "password": "testpass123"},
        ],
    )
    def test_bad_credentials_return_401(self, api_client, user, credentials):
        response = api_client.post("/api/v1/auth/login/", credentials, format="json")
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid email or password."}
        assert "authToken" not in response.cookies

    def test_inactive_user_cannot_log_in(self, api_client, user):
        user.is_active = False
        user.save()
        response = api_client.post(
            "/api/v1/auth/login/",
            {"email": "buyer@example.com", "password": "testpass123"},
            format="json",
        )
        assert response.status_code == 401

    def test_logout_clears_cookie(self, api_client, user):
        api_client.post(
            "/api/v1/auth/login/",
            {"email": "buyer@example.com", "password": "testpass123"},
            format="json",
        )
        response = api_client.post("/api/v1/auth/logout/")
        assert response.status_code == 200
        assert response.cookies["authToken"].value == ""
        assert api_client.get("/api/v1/me").status_code == 401
