from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.core.security_events import RequestContext, emit_security_event
from survey_gems.economy.balance.errors import BalanceUserNotFoundError
from survey_gems.economy.balance.service import BalanceService
from survey_gems.economy.offerwall.errors import OfferwallUserNotFoundError
from survey_gems.economy.offerwall.types import OfferwallCreditResult

DEFAULT_EARNINGS_DESCRIPTION = "Offerwall earnings"

logger = structlog.get_logger(__name__)


class OfferwallService:
    """Credits rewards reported by the client after an offerwall task.

    Amounts are taken as reported; nothing is checked against the provider.
    """

    @staticmethod
    async def complete_offer(
        session: AsyncSession,
        *,
        user_id: str,
        offer_id: str,
        provider: str,
        reward: int,
        title: str,
        now_utc: datetime,
        context: RequestContext | None = None,
    ) -> OfferwallCreditResult:
        try:
            posting = await BalanceService.credit(
                session,
                user_id=user_id,
                amount=reward,
                transaction_type="offerwall_reward",
                description=f"Offerwall: {title}",
                offerwall_provider=provider,
                offerwall_offer_id=offer_id,
                now_utc=now_utc,
            )
        except BalanceUserNotFoundError as exc:
            raise OfferwallUserNotFoundError from exc

        await emit_security_event(
            session,
            action="offerwall_completed",
            user_id=user_id,
            details={
                "offer_id": offer_id,
                "provider": provider,
                "reward": reward,
                "title": title,
                "client_reported": True,
            },
            context=context,
            happened_at=now_utc,
        )
        logger.info(
            "offerwall_completed",
            user_id=user_id,
            provider=provider,
            offer_id=offer_id,
            reward=reward,
        )
        return OfferwallCreditResult(
            transaction=posting.transaction,
            amount=reward,
            gem_balance=posting.balance_after,
        )

    @staticmethod
    async def record_earnings(
        session: AsyncSession,
        *,
        user_id: str,
        amount: int,
        description: str | None,
        now_utc: datetime,
        context: RequestContext | None = None,
    ) -> OfferwallCreditResult:
        try:
            posting = await BalanceService.credit(
                session,
                user_id=user_id,
                amount=amount,
                transaction_type="offerwall_reward",
                description=description or DEFAULT_EARNINGS_DESCRIPTION,
                now_utc=now_utc,
            )
        except BalanceUserNotFoundError as exc:
            raise OfferwallUserNotFoundError from exc

        await emit_security_event(
            session,
            action="offerwall_earnings",
            user_id=user_id,
            details={"amount": amount, "description": description, "client_reported": True},
            context=context,
            happened_at=now_utc,
        )
        logger.info("offerwall_earnings_recorded", user_id=user_id, amount=amount)
        return OfferwallCreditResult(
            transaction=posting.transaction,
            amount=amount,
            gem_balance=posting.balance_after,
        )
