from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.core.security_events import RequestContext, emit_security_event
from survey_gems.db.models.withdrawal_requests import WithdrawalRequest
from survey_gems.db.repo.users_repo import UsersRepo
from survey_gems.db.repo.withdrawals_repo import WithdrawalsRepo
from survey_gems.economy.balance.errors import BalanceUserNotFoundError, InsufficientBalanceError
from survey_gems.economy.balance.service import BalanceService
from survey_gems.economy.balance.types import LedgerPosting
from survey_gems.economy.withdrawals.constants import MIN_WITHDRAWAL_GEMS, WITHDRAWAL_DECISIONS
from survey_gems.economy.withdrawals.errors import (
    PendingWithdrawalExistsError,
    WithdrawalAlreadyProcessedError,
    WithdrawalBelowMinimumError,
    WithdrawalDecisionInvalidError,
    WithdrawalInsufficientBalanceError,
    WithdrawalNotFoundError,
    WithdrawalUserNotFoundError,
)
from survey_gems.economy.withdrawals.types import WithdrawalDecisionResult, WithdrawalRequestResult

logger = structlog.get_logger(__name__)


class WithdrawalService:
    @staticmethod
    async def get_pending_for_user(session: AsyncSession, user_id: str) -> WithdrawalRequest | None:
        return await WithdrawalsRepo.get_pending_by_user(session, user_id)

    @staticmethod
    async def list_pending(session: AsyncSession) -> list[WithdrawalRequest]:
        return await WithdrawalsRepo.list_pending(session)

    @staticmethod
    async def request_withdrawal(
        session: AsyncSession,
        *,
        user_id: str,
        amount: int,
        wallet_address: str,
        now_utc: datetime,
        min_amount: int = MIN_WITHDRAWAL_GEMS,
        context: RequestContext | None = None,
    ) -> WithdrawalRequestResult:
        user = await UsersRepo.get_by_id_for_update(session, user_id)
        if user is None:
            raise WithdrawalUserNotFoundError

        if await WithdrawalsRepo.get_pending_by_user(session, user_id) is not None:
            raise PendingWithdrawalExistsError
        if user.gem_balance < amount:
            raise WithdrawalInsufficientBalanceError
        if amount < min_amount:
            raise WithdrawalBelowMinimumError(min_amount)

        try:
            withdrawal = await WithdrawalsRepo.create(
                session,
                user_id=user_id,
                amount=amount,
                wallet_address=wallet_address,
                requested_at=now_utc,
            )
        except IntegrityError as exc:
            # The partial unique index allows one pending row per user.
            raise PendingWithdrawalExistsError from exc

        try:
            posting = await BalanceService.debit(
                session,
                user_id=user_id,
                amount=amount,
                transaction_type="withdrawal_request",
                description=f"Withdrawal requested: {amount} gems",
                withdrawal_id=withdrawal.id,
                now_utc=now_utc,
            )
        except InsufficientBalanceError as exc:
            raise WithdrawalInsufficientBalanceError from exc
        except BalanceUserNotFoundError as exc:
            raise WithdrawalUserNotFoundError from exc

        await emit_security_event(
            session,
            action="withdrawal_requested",
            user_id=user_id,
            details={"amount": amount, "wallet_address": wallet_address},
            context=context,
            happened_at=now_utc,
        )
        logger.info(
            "withdrawal_requested",
            user_id=user_id,
            withdrawal_id=withdrawal.id,
            amount=amount,
            gem_balance=posting.balance_after,
        )
        return WithdrawalRequestResult(
            withdrawal=withdrawal,
            transaction=posting.transaction,
            gem_balance=posting.balance_after,
        )

    @staticmethod
    async def adjudicate(
        session: AsyncSession,
        *,
        withdrawal_id: int,
        decision: str,
        admin_notes: str | None,
        admin_user_id: str,
        now_utc: datetime,
        context: RequestContext | None = None,
    ) -> WithdrawalDecisionResult:
        if decision not in WITHDRAWAL_DECISIONS:
            raise WithdrawalDecisionInvalidError

        withdrawal = await WithdrawalsRepo.get_by_id_for_update(session, withdrawal_id)
        if withdrawal is None:
            raise WithdrawalNotFoundError
        if withdrawal.status != "pending":
            raise WithdrawalAlreadyProcessedError

        processed = await WithdrawalsRepo.update_status(
            session,
            withdrawal_id,
            status=decision,
            admin_notes=admin_notes,
            processed_by=admin_user_id,
            processed_at=now_utc,
        )
        if processed is None:
            raise WithdrawalAlreadyProcessedError

        description = f"Withdrawal {decision}: {processed.amount} gems"
        posting: LedgerPosting
        try:
            if decision == "rejected":
                posting = await BalanceService.credit(
                    session,
                    user_id=processed.user_id,
                    amount=processed.amount,
                    transaction_type="withdrawal_rejected",
                    description=description,
                    withdrawal_id=processed.id,
                    now_utc=now_utc,
                )
            else:
                # Funds already left the balance when the request was filed.
                posting = await BalanceService.record_marker(
                    session,
                    user_id=processed.user_id,
                    transaction_type="withdrawal_approved",
                    description=description,
                    withdrawal_id=processed.id,
                    now_utc=now_utc,
                )
        except BalanceUserNotFoundError as exc:
            raise WithdrawalUserNotFoundError from exc

        await emit_security_event(
            session,
            action=f"withdrawal_{decision}",
            user_id=admin_user_id,
            details={
                "withdrawal_id": processed.id,
                "amount": processed.amount,
                "user_id": processed.user_id,
                "notes": admin_notes,
            },
            context=context,
            happened_at=now_utc,
        )
        logger.info(
            "withdrawal_adjudicated",
            withdrawal_id=processed.id,
            decision=decision,
            admin_user_id=admin_user_id,
            user_id=processed.user_id,
            amount=processed.amount,
        )
        return WithdrawalDecisionResult(
            withdrawal=processed,
            transaction=posting.transaction,
            user_gem_balance=posting.balance_after,
        )
