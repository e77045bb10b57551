from __future__ import annotations

from fastapi.testclient import TestClient


def test_register_returns_created_user(api_client: TestClient, auth_service) -> None:
    response = api_client.post(
        "/api/v1/auth/register",
        json={"email": "grace@example.com", "password": "strong-pass-123", "display_name": "Grace"},
    )

    assert response.status_code == 201
    assert response.json()["display_name"] == "Grace"
    assert auth_service.registered[0]["email"] == "grace@example.com"


def test_register_conflict_for_taken_email(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/v1/auth/register",
        json={"email": "taken@example.com", "password": "strong-pass-123"},
    )

    assert response.status_code == 409


def test_login_returns_bearer_token(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/v1/auth/login",
        json={"email": "ada@example.com", "password": "strong-pass-123"},
    )
    rejected = api_client.post(
        "/api/v1/auth/login",
        json={"email": "ada@example.com", "password": "wrong-pass-123"},
    )

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    assert rejected.status_code == 401


def test_me_requires_bearer_token(unauthenticated_client: TestClient) -> None:
    missing = unauthenticated_client.get("/api/v1/auth/me")
    invalid = unauthenticated_client.get("/api/v1/auth/me", headers={"Authorization": "Bearer nope"})
    valid = unauthenticated_client.get("/api/v1/auth/me", headers={"Authorization": "Bearer valid-token"})

    assert missing.status_code == 401
    assert invalid.status_code == 401
    assert valid.json()["email"] == "ada@example.com"


def test_watchlist_requires_authentication(unauthenticated_client: TestClient) -> None:
    assert unauthenticated_client.get("/api/v1/watchlist").status_code == 401


def test_health(api_client: TestClient) -> None:
    assert api_client.get("/api/v1/health").json() == {"status": "ok"}
