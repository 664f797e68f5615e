from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from survey_gems.api.routes import internal_auth
from survey_gems.main import app
from tests.db_fixtures import _client

SIGN_IN_PAYLOAD = {"user_id": "ext-1", "email": "person@example.com", "first_name": "Pat"}
INTERNAL_HEADERS = {"X-Internal-Token": "test-internal-token"}


def test_sign_in_rejects_missing_token(monkeypatch) -> None:
    monkeypatch.setattr(
        internal_auth,
        "get_settings",
        lambda: SimpleNamespace(
            internal_api_token="internal-secret",
            internal_api_allowlist="0.0.0.0/0",
            internal_api_trusted_proxies="",
        ),
    )

    client = TestClient(app)
    response = client.post("/internal/auth/sign-in", json=SIGN_IN_PAYLOAD)

    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_FORBIDDEN", "message": "Forbidden"}}


def test_sign_in_rejects_disallowed_ip(monkeypatch) -> None:
    monkeypatch.setattr(
        internal_auth,
        "get_settings",
        lambda: SimpleNamespace(
            internal_api_token="internal-secret",
            internal_api_allowlist="192.168.0.0/16",
            internal_api_trusted_proxies="",
        ),
    )

    client = TestClient(app)
    response = client.post(
        "/internal/auth/sign-in",
        json=SIGN_IN_PAYLOAD,
        headers={"X-Internal-Token": "internal-secret", "X-Forwarded-For": "192.168.1.10"},
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_sign_in_creates_user_and_sets_session_cookie(db_schema) -> None:
    async with _client() as client:
        response = await client.post("/internal/auth/sign-in", json=SIGN_IN_PAYLOAD, headers=INTERNAL_HEADERS)
        assert response.status_code == 200
        payload = response.json()
        assert payload["created"] is True
        assert payload["user"]["gem_balance"] == 0
        assert payload["user"]["is_admin"] is False
        assert "survey_gems_sid" in response.headers["set-cookie"]
        assert "httponly" in response.headers["set-cookie"].lower()

    async with _client(payload["session_token"]) as client:
        me = await client.get("/api/auth/user")
    assert me.status_code == 200
    assert me.json()["email"] == "person@example.com"


@pytest.mark.asyncio
async def test_sign_in_bootstraps_configured_admin(db_schema) -> None:
    async with _client() as client:
        response = await client.post(
            "/internal/auth/sign-in",
            json={"user_id": "owner", "email": "Admin@Example.com"},
            headers=INTERNAL_HEADERS,
        )

    assert response.status_code == 200
    assert response.json()["user"]["is_admin"] is True


@pytest.mark.asyncio
async def test_sign_in_email_conflict(db_schema) -> None:
    async with _client() as client:
        first = await client.post("/internal/auth/sign-in", json=SIGN_IN_PAYLOAD, headers=INTERNAL_HEADERS)
        second = await client.post(
            "/internal/auth/sign-in",
            json={**SIGN_IN_PAYLOAD, "user_id": "ext-2"},
            headers=INTERNAL_HEADERS,
        )

    assert first.status_code == 200
    assert second.status_code == 409
    assert second.json()["detail"]["code"] == "E_EMAIL_CONFLICT"


@pytest.mark.asyncio
async def test_sign_in_validates_payload(db_schema) -> None:
    async with _client() as client:
        response = await client.post(
            "/internal/auth/sign-in",
            json={"user_id": "", "email": "not-an-email"},
            headers=INTERNAL_HEADERS,
        )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "E_VALIDATION"
