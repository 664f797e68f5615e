from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.models.withdrawal_requests import WithdrawalRequest


class WithdrawalsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, withdrawal_id: int) -> WithdrawalRequest | None:
        return await session.get(WithdrawalRequest, withdrawal_id)

    @staticmethod
    async def get_by_id_for_update(
        session: AsyncSession,
        withdrawal_id: int,
    ) -> WithdrawalRequest | None:
        stmt = select(WithdrawalRequest).where(WithdrawalRequest.id == withdrawal_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        user_id: str,
        amount: int,
        wallet_address: str,
        requested_at: datetime,
    ) -> WithdrawalRequest:
        withdrawal = WithdrawalRequest(
            user_id=user_id,
            amount=amount,
            wallet_address=wallet_address,
            status="pending",
            requested_at=requested_at,
        )
        session.add(withdrawal)
        await session.flush()
        return withdrawal

    @staticmethod
    async def list_pending(session: AsyncSession) -> list[WithdrawalRequest]:
        stmt = (
            select(WithdrawalRequest)
            .where(WithdrawalRequest.status == "pending")
            .order_by(WithdrawalRequest.requested_at.desc(), WithdrawalRequest.id.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_pending_by_user(session: AsyncSession, user_id: str) -> WithdrawalRequest | None:
        stmt = (
            select(WithdrawalRequest)
            .where(
                WithdrawalRequest.user_id == user_id,
                WithdrawalRequest.status == "pending",
            )
            .order_by(WithdrawalRequest.requested_at.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def update_status(
        session: AsyncSession,
        withdrawal_id: int,
        *,
        status: str,
        admin_notes: str | None,
        processed_by: str,
        processed_at: datetime,
    ) -> WithdrawalRequest | None:
        """Move a pending withdrawal to ``status``; None if it is no longer pending."""
        stmt = (
            update(WithdrawalRequest)
            .where(
                WithdrawalRequest.id == withdrawal_id,
                WithdrawalRequest.status == "pending",
            )
            .values(
                status=status,
                admin_notes=admin_notes,
                processed_by=processed_by,
                processed_at=processed_at,
            )
            .returning(WithdrawalRequest.id)
        )
        result = await session.execute(stmt)
        if result.scalar_one_or_none() is None:
            return None
        return await session.get(WithdrawalRequest, withdrawal_id, populate_existing=True)
