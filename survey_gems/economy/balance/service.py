from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.models.transactions import Transaction
from survey_gems.db.repo.transactions_repo import TransactionsRepo
from survey_gems.db.repo.users_repo import UsersRepo
from survey_gems.economy.balance.errors import BalanceUserNotFoundError, InsufficientBalanceError
from survey_gems.economy.balance.types import LedgerPosting


class BalanceService:
    """Balance mutations paired with their ledger rows.

    Every helper expects to run inside the caller's unit of work, so the
    balance change and the transaction row commit or roll back together.
    """

    @staticmethod
    def _build_transaction(
        *,
        user_id: str,
        transaction_type: str,
        amount: int,
        description: str,
        now_utc: datetime,
        survey_id: int | None,
        withdrawal_id: int | None,
        offerwall_provider: str | None,
        offerwall_offer_id: str | None,
    ) -> Transaction:
        return Transaction(
            user_id=user_id,
            type=transaction_type,
            amount=amount,
            description=description,
            survey_id=survey_id,
            withdrawal_id=withdrawal_id,
            offerwall_provider=offerwall_provider,
            offerwall_offer_id=offerwall_offer_id,
            created_at=now_utc,
        )

    @staticmethod
    async def credit(
        session: AsyncSession,
        *,
        user_id: str,
        amount: int,
        transaction_type: str,
        description: str,
        now_utc: datetime,
        survey_id: int | None = None,
        withdrawal_id: int | None = None,
        offerwall_provider: str | None = None,
        offerwall_offer_id: str | None = None,
    ) -> LedgerPosting:
        if amount <= 0:
            raise ValueError("credit amount must be positive")

        balance_after = await UsersRepo.adjust_gem_balance(
            session,
            user_id,
            amount,
            now_utc=now_utc,
        )
        if balance_after is None:
            raise BalanceUserNotFoundError

        transaction = await TransactionsRepo.create(
            session,
            transaction=BalanceService._build_transaction(
                user_id=user_id,
                transaction_type=transaction_type,
                amount=amount,
                description=description,
                now_utc=now_utc,
                survey_id=survey_id,
                withdrawal_id=withdrawal_id,
                offerwall_provider=offerwall_provider,
                offerwall_offer_id=offerwall_offer_id,
            ),
        )
        return LedgerPosting(transaction=transaction, balance_after=balance_after)

    @staticmethod
    async def debit(
        session: AsyncSession,
        *,
        user_id: str,
        amount: int,
        transaction_type: str,
        description: str,
        now_utc: datetime,
        withdrawal_id: int | None = None,
    ) -> LedgerPosting:
        if amount <= 0:
            raise ValueError("debit amount must be positive")

        balance_after = await UsersRepo.adjust_gem_balance(
            session,
            user_id,
            -amount,
            now_utc=now_utc,
            require_at_least=amount,
        )
        if balance_after is None:
            if await UsersRepo.get_by_id(session, user_id) is None:
                raise BalanceUserNotFoundError
            raise InsufficientBalanceError

        transaction = await TransactionsRepo.create(
            session,
            transaction=BalanceService._build_transaction(
                user_id=user_id,
                transaction_type=transaction_type,
                amount=-amount,
                description=description,
                now_utc=now_utc,
                survey_id=None,
                withdrawal_id=withdrawal_id,
                offerwall_provider=None,
                offerwall_offer_id=None,
            ),
        )
        return LedgerPosting(transaction=transaction, balance_after=balance_after)

    @staticmethod
    async def record_marker(
        session: AsyncSession,
        *,
        user_id: str,
        transaction_type: str,
        description: str,
        now_utc: datetime,
        withdrawal_id: int | None = None,
    ) -> LedgerPosting:
        """Append a zero-amount ledger row; the balance is left untouched."""
        user = await UsersRepo.get_by_id(session, user_id)
        if user is None:
            raise BalanceUserNotFoundError

        transaction = await TransactionsRepo.create(
            session,
            transaction=BalanceService._build_transaction(
                user_id=user_id,
                transaction_type=transaction_type,
                amount=0,
                description=description,
                now_utc=now_utc,
                survey_id=None,
                withdrawal_id=withdrawal_id,
                offerwall_provider=None,
                offerwall_offer_id=None,
            ),
        )
        return LedgerPosting(transaction=transaction, balance_after=user.gem_balance)
