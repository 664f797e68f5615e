from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import func, select

from survey_gems.db.models.transactions import Transaction
from survey_gems.db.models.withdrawal_requests import WithdrawalRequest
from survey_gems.db.repo.security_logs_repo import SecurityLogsRepo
from survey_gems.db.repo.transactions_repo import TransactionsRepo
from survey_gems.db.repo.withdrawals_repo import WithdrawalsRepo
from survey_gems.db.session import SessionLocal
from survey_gems.economy.withdrawals.errors import (
    PendingWithdrawalExistsError,
    WithdrawalAlreadyProcessedError,
    WithdrawalBelowMinimumError,
    WithdrawalDecisionInvalidError,
    WithdrawalInsufficientBalanceError,
    WithdrawalNotFoundError,
    WithdrawalUserNotFoundError,
)
from survey_gems.economy.withdrawals.service import WithdrawalService
from tests.db_fixtures import UTC, _create_user, _get_user, _ledger_sum


async def _request(user_id: str, amount: int, *, wallet_address: str = "wallet-1"):
    async with SessionLocal.begin() as session:
        return await WithdrawalService.request_withdrawal(
            session,
            user_id=user_id,
            amount=amount,
            wallet_address=wallet_address,
            now_utc=datetime.now(UTC),
        )


async def _adjudicate(withdrawal_id: int, decision: str, admin_id: str, notes: str | None = None):
    async with SessionLocal.begin() as session:
        return await WithdrawalService.adjudicate(
            session,
            withdrawal_id=withdrawal_id,
            decision=decision,
            admin_notes=notes,
            admin_user_id=admin_id,
            now_utc=datetime.now(UTC),
        )


async def _count(model) -> int:
    async with SessionLocal() as session:
        return int((await session.execute(select(func.count()).select_from(model))).scalar_one())


@pytest.mark.asyncio
async def test_request_withdrawal_debits_balance_and_records_pending_row(db_schema) -> None:
    user = await _create_user("saver", gem_balance=110)

    result = await _request(user.id, 100, wallet_address="TX-wallet")

    assert result.gem_balance == 10
    assert result.withdrawal.status == "pending"
    assert result.withdrawal.amount == 100
    assert result.transaction.type == "withdrawal_request"
    assert result.transaction.amount == -100
    assert result.transaction.withdrawal_id == result.withdrawal.id
    assert result.transaction.description == "Withdrawal requested: 100 gems"
    assert (await _get_user(user.id)).gem_balance == 10

    async with SessionLocal() as session:
        pending = await WithdrawalService.get_pending_for_user(session, user.id)
        logs = await SecurityLogsRepo.list_by_user(session, user.id)
    assert pending is not None
    assert pending.id == result.withdrawal.id
    assert logs[0].action == "withdrawal_requested"
    assert logs[0].details == {"amount": 100, "wallet_address": "TX-wallet"}


@pytest.mark.asyncio
async def test_request_below_minimum_creates_nothing(db_schema) -> None:
    user = await _create_user("small", gem_balance=50)

    with pytest.raises(WithdrawalBelowMinimumError) as exc_info:
        await _request(user.id, 50)

    assert exc_info.value.min_amount == 100
    assert await _count(WithdrawalRequest) == 0
    assert await _count(Transaction) == 0
    assert (await _get_user(user.id)).gem_balance == 50


@pytest.mark.asyncio
async def test_request_checks_run_in_documented_order(db_schema) -> None:
    user = await _create_user("order", gem_balance=250)
    await _request(user.id, 100)

    # A pending request wins over both the balance and the minimum checks.
    with pytest.raises(PendingWithdrawalExistsError):
        await _request(user.id, 10_000)

    poor = await _create_user("poor", gem_balance=20)
    # Insufficient balance is reported before the minimum.
    with pytest.raises(WithdrawalInsufficientBalanceError):
        await _request(poor.id, 50)

    with pytest.raises(WithdrawalUserNotFoundError):
        await _request("missing", 100)


@pytest.mark.asyncio
async def test_concurrent_pending_request_maps_unique_violation(db_schema, monkeypatch) -> None:
    user = await _create_user("double", gem_balance=500)
    first = await _request(user.id, 100)

    async def _no_pending(*args, **kwargs):
        return None

    # A concurrent submission that already passed the pending check.
    monkeypatch.setattr(WithdrawalsRepo, "get_pending_by_user", staticmethod(_no_pending))

    with pytest.raises(PendingWithdrawalExistsError):
        await _request(user.id, 100, wallet_address="wallet-2")

    assert first.gem_balance == 400
    assert (await _get_user(user.id)).gem_balance == 400
    # The seeded balance has no ledger row; only the first request is posted.
    assert await _ledger_sum(user.id) == -100
    assert await _count(WithdrawalRequest) == 1
    assert await _count(Transaction) == 1


@pytest.mark.asyncio
async def test_request_more_than_balance_is_rejected(db_schema) -> None:
    user = await _create_user("overdraw", gem_balance=150)

    with pytest.raises(WithdrawalInsufficientBalanceError):
        await _request(user.id, 151)

    assert (await _get_user(user.id)).gem_balance == 150
    assert await _count(WithdrawalRequest) == 0


@pytest.mark.asyncio
async def test_rejection_restores_balance(db_schema) -> None:
    user = await _create_user("rejected", gem_balance=110)
    admin = await _create_user("admin", is_admin=True)
    requested = await _request(user.id, 100)

    result = await _adjudicate(requested.withdrawal.id, "rejected", admin.id, notes="wallet invalid")

    assert result.withdrawal.status == "rejected"
    assert result.withdrawal.processed_by == admin.id
    assert result.withdrawal.admin_notes == "wallet invalid"
    assert result.withdrawal.processed_at is not None
    assert result.transaction.type == "withdrawal_rejected"
    assert result.transaction.amount == 100
    assert result.user_gem_balance == 110
    assert (await _get_user(user.id)).gem_balance == 110
    # Seeded balance has no ledger row; the request and its reversal cancel out.
    assert await _ledger_sum(user.id) == 0

    async with SessionLocal() as session:
        admin_logs = await SecurityLogsRepo.list_by_user(session, admin.id)
    assert admin_logs[0].action == "withdrawal_rejected"
    assert admin_logs[0].details == {
        "withdrawal_id": requested.withdrawal.id,
        "amount": 100,
        "user_id": user.id,
        "notes": "wallet invalid",
    }


@pytest.mark.asyncio
async def test_approval_keeps_balance_and_records_marker(db_schema) -> None:
    user = await _create_user("approved", gem_balance=130)
    admin = await _create_user("admin", is_admin=True)
    requested = await _request(user.id, 120)

    result = await _adjudicate(requested.withdrawal.id, "approved", admin.id)

    assert result.withdrawal.status == "approved"
    assert result.transaction.type == "withdrawal_approved"
    assert result.transaction.amount == 0
    assert result.transaction.description == "Withdrawal approved: 120 gems"
    assert result.user_gem_balance == 10
    assert (await _get_user(user.id)).gem_balance == 10

    async with SessionLocal() as session:
        history = await TransactionsRepo.list_recent_by_user(session, user.id)
    assert [item.type for item in history] == ["withdrawal_approved", "withdrawal_request"]


@pytest.mark.asyncio
async def test_processed_withdrawals_are_terminal(db_schema) -> None:
    user = await _create_user("terminal", gem_balance=200)
    admin = await _create_user("admin", is_admin=True)
    requested = await _request(user.id, 100)
    await _adjudicate(requested.withdrawal.id, "approved", admin.id)

    with pytest.raises(WithdrawalAlreadyProcessedError):
        await _adjudicate(requested.withdrawal.id, "rejected", admin.id)

    assert (await _get_user(user.id)).gem_balance == 100


@pytest.mark.asyncio
async def test_adjudicate_rejects_unknown_withdrawal_and_decision(db_schema) -> None:
    admin = await _create_user("admin", is_admin=True)

    with pytest.raises(WithdrawalNotFoundError):
        await _adjudicate(999_999, "approved", admin.id)
    with pytest.raises(WithdrawalDecisionInvalidError):
        await _adjudicate(1, "pending", admin.id)


@pytest.mark.asyncio
async def test_list_pending_returns_only_pending_requests(db_schema) -> None:
    admin = await _create_user("admin", is_admin=True)
    first = await _create_user("first", gem_balance=300)
    second = await _create_user("second", gem_balance=300)
    processed = await _request(first.id, 100)
    await _adjudicate(processed.withdrawal.id, "approved", admin.id)
    pending = await _request(second.id, 150)

    async with SessionLocal() as session:
        rows = await WithdrawalService.list_pending(session)

    assert [row.id for row in rows] == [pending.withdrawal.id]
