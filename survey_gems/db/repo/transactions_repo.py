from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.models.transactions import Transaction


class TransactionsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, transaction: Transaction) -> Transaction:
        session.add(transaction)
        await session.flush()
        return transaction

    @staticmethod
    async def list_recent_by_user(
        session: AsyncSession,
        user_id: str,
        *,
        limit: int = 10,
    ) -> list[Transaction]:
        stmt = (
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def sum_amount_by_user(session: AsyncSession, user_id: str) -> int:
        stmt = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.user_id == user_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

