"""Tests for API security middleware and token helpers."""

from __future__ import annotations

from fastapi.testclient import TestClient

from delegate_auth.api.security import generate_token, validate_token
from delegate_auth.constants import MAX_REQUEST_SIZE


class TestTokenHelpers:
    def test_generates_64_char_hex(self) -> None:
        token = generate_token()

        assert len(token) == 64
        assert all(c in "0123456789abcdef" for c in token)

    def test_validate_token(self) -> None:
        assert validate_token("abc", "abc") is True
        assert validate_token("abc", "abd") is False
        assert validate_token("", "abc") is False


class TestAdminAuthentication:
    """/api/* requires the admin bearer token."""

    def test_missing_token_rejected(self, client: TestClient) -> None:
        response = client.get("/api/delegates")

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "AUTH_REQUIRED"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_wrong_token_rejected(self, client: TestClient) -> None:
        response = client.get("/api/delegates", headers={"Authorization": "Bearer " + "0" * 64})

        assert response.status_code == 401

    def test_non_bearer_scheme_rejected(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        token = admin_headers["Authorization"].split(" ", 1)[1]

        response = client.get("/api/delegates", headers={"Authorization": f"Basic {token}"})

        assert response.status_code == 401

    def test_admin_token_accepted(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        assert client.get("/api/delegates", headers=admin_headers).status_code == 200

    def test_exchange_needs_no_admin_token(self, client: TestClient) -> None:
        """Delegates call the exchange without admin credentials."""
        response = client.post("/auth/delegate/exchange", json={"token": "x"})

        assert response.status_code == 404


class TestRequestLimitsAndHeaders:
    def test_oversized_body_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/auth/delegate/exchange",
            content=b"x" * (MAX_REQUEST_SIZE + 1),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 413
        assert response.json()["detail"]["code"] == "REQUEST_TOO_LARGE"

    def test_security_headers_present(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-store"

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
