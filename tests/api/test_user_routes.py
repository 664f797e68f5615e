from __future__ import annotations

import pytest

from tests.db_fixtures import _client, _create_survey, _create_user, _issue_session_token


async def _signed_in(seed: str, *, gem_balance: int = 0) -> tuple[str, str]:
    user = await _create_user(seed, gem_balance=gem_balance)
    return user.id, await _issue_session_token(user.id)


@pytest.mark.asyncio
async def test_surveys_list_and_detail(db_schema) -> None:
    _, token = await _signed_in("reader")
    survey = await _create_survey(title="Streaming", reward=60)
    hidden = await _create_survey(title="Hidden", is_active=False)

    async with _client(token) as client:
        listing = await client.get("/api/surveys")
        detail = await client.get(f"/api/surveys/{survey.id}")
        hidden_detail = await client.get(f"/api/surveys/{hidden.id}")
        missing = await client.get("/api/surveys/999999")

    assert listing.status_code == 200
    assert [item["title"] for item in listing.json()] == ["Streaming"]
    assert detail.json()["reward"] == 60
    assert hidden_detail.status_code == 200
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "E_SURVEY_NOT_FOUND"


@pytest.mark.asyncio
async def test_complete_survey_endpoint_maps_business_errors(db_schema) -> None:
    _, token = await _signed_in("completer")
    survey = await _create_survey(reward=50)
    inactive = await _create_survey(title="Closed", is_active=False)

    async with _client(token) as client:
        first = await client.post(f"/api/surveys/{survey.id}/complete", json={"responses": {"q1": "yes"}})
        second = await client.post(f"/api/surveys/{survey.id}/complete", json={"responses": {"q1": "yes"}})
        closed = await client.post(f"/api/surveys/{inactive.id}/complete", json={"responses": {}})
        missing = await client.post("/api/surveys/999999/complete", json={"responses": {}})

    assert first.status_code == 200
    assert first.json()["gems_earned"] == 50
    assert first.json()["gem_balance"] == 50
    assert first.json()["response"]["responses"] == {"q1": "yes"}
    assert second.status_code == 400
    assert second.json()["detail"]["code"] == "E_SURVEY_ALREADY_COMPLETED"
    assert closed.status_code == 400
    assert closed.json()["detail"]["code"] == "E_SURVEY_INACTIVE"
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_withdrawal_endpoints(db_schema) -> None:
    _, token = await _signed_in("withdrawer", gem_balance=150)

    async with _client(token) as client:
        none_pending = await client.get("/api/withdrawals/pending")
        below = await client.post("/api/withdrawals", json={"amount": 50, "wallet_address": "w"})
        too_much = await client.post("/api/withdrawals", json={"amount": 500, "wallet_address": "w"})
        invalid = await client.post("/api/withdrawals", json={"amount": -5, "wallet_address": "w"})
        blank_wallet = await client.post("/api/withdrawals", json={"amount": 100, "wallet_address": "   "})
        created = await client.post("/api/withdrawals", json={"amount": 100, "wallet_address": " wallet-9 "})
        duplicate = await client.post("/api/withdrawals", json={"amount": 100, "wallet_address": "w"})
        pending = await client.get("/api/withdrawals/pending")
        me = await client.get("/api/auth/user")

    assert none_pending.status_code == 200
    assert none_pending.json() is None
    assert below.status_code == 400
    assert below.json()["detail"] == {
        "code": "E_WITHDRAWAL_BELOW_MINIMUM",
        "message": "Minimum withdrawal is 100 gems",
    }
    assert too_much.json()["detail"]["code"] == "E_INSUFFICIENT_BALANCE"
    assert invalid.status_code == 400
    assert invalid.json()["detail"]["code"] == "E_VALIDATION"
    assert blank_wallet.status_code == 400
    assert blank_wallet.json()["detail"]["code"] == "E_VALIDATION"
    assert created.status_code == 200
    assert created.json()["status"] == "pending"
    assert created.json()["wallet_address"] == "wallet-9"
    assert duplicate.json()["detail"]["code"] == "E_WITHDRAWAL_PENDING"
    assert pending.json()["id"] == created.json()["id"]
    assert me.json()["gem_balance"] == 50


@pytest.mark.asyncio
async def test_offerwall_endpoints_and_transactions(db_schema) -> None:
    _, token = await _signed_in("offers")

    async with _client(token) as client:
        completed = await client.post(
            "/api/offerwall/complete",
            json={"offer_id": "o-1", "provider": "cpx", "reward": 30, "title": "Play a game"},
        )
        earned = await client.post("/api/offerwall/earnings", json={"amount": 12})
        rejected = await client.post("/api/offerwall/earnings", json={"amount": 0})
        history = await client.get("/api/transactions")

    assert completed.json() == {"success": True, "reward": 30, "gem_balance": 30}
    assert earned.json() == {"success": True, "amount": 12, "gem_balance": 42}
    assert rejected.status_code == 400
    assert [item["description"] for item in history.json()] == ["Offerwall earnings", "Offerwall: Play a game"]


@pytest.mark.asyncio
async def test_transactions_are_capped_at_page_size(db_schema) -> None:
    _, token = await _signed_in("busy")

    async with _client(token) as client:
        for index in range(12):
            response = await client.post("/api/offerwall/earnings", json={"amount": 1, "description": f"Earning {index}"})
            assert response.status_code == 200
        history = await client.get("/api/transactions")

    assert len(history.json()) == 10
    assert history.json()[0]["description"] == "Earning 11"
