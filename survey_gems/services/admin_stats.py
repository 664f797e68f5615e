from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.repo.stats_repo import StatsRepo

CENTS = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class AdminStats:
    total_users: int
    pending_withdrawals: int
    total_payouts: str


def gems_to_currency(gems: int, *, rate: Decimal) -> str:
    return str((Decimal(gems) * rate).quantize(CENTS, rounding=ROUND_HALF_UP))


async def build_admin_stats(session: AsyncSession, *, gem_usd_rate: Decimal) -> AdminStats:
    snapshot = await StatsRepo.get_user_stats(session)
    return AdminStats(
        total_users=snapshot.total_users,
        pending_withdrawals=snapshot.pending_withdrawals,
        total_payouts=gems_to_currency(snapshot.approved_withdrawal_gems, rate=gem_usd_rate),
    )
