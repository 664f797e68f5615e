from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.models.users import User
from survey_gems.db.models.withdrawal_requests import WithdrawalRequest


@dataclass(frozen=True, slots=True)
class UserStatsSnapshot:
    total_users: int
    pending_withdrawals: int
    approved_withdrawal_gems: int


class StatsRepo:
    @staticmethod
    async def get_user_stats(session: AsyncSession) -> UserStatsSnapshot:
        total_users = await session.execute(select(func.count(User.id)))
        pending = await session.execute(
            select(func.count(WithdrawalRequest.id)).where(WithdrawalRequest.status == "pending")
        )
        approved_sum = await session.execute(
            select(func.coalesce(func.sum(WithdrawalRequest.amount), 0)).where(
                WithdrawalRequest.status == "approved"
            )
        )
        return UserStatsSnapshot(
            total_users=int(total_users.scalar_one() or 0),
            pending_withdrawals=int(pending.scalar_one() or 0),
            approved_withdrawal_gems=int(approved_sum.scalar_one() or 0),
        )
