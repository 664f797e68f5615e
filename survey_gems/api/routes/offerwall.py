from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from survey_gems.api.auth_gate import get_current_user
from survey_gems.api.errors import error_detail
from survey_gems.core.config import get_settings
from survey_gems.db.models.users import User
from survey_gems.db.session import SessionLocal
from survey_gems.economy.offerwall.errors import OfferwallUserNotFoundError
from survey_gems.economy.offerwall.service import OfferwallService
from survey_gems.services.internal_auth import build_request_context

router = APIRouter(tags=["offerwall"])


class OfferCompleteRequest(BaseModel):
    offer_id: str = Field(min_length=1, max_length=255)
    provider: str = Field(min_length=1, max_length=64)
    reward: int = Field(gt=0)
    title: str = Field(min_length=1, max_length=255)


class OfferCompleteResponse(BaseModel):
    success: bool
    reward: int
    gem_balance: int


class OfferwallEarningsRequest(BaseModel):
    amount: int = Field(gt=0)
    description: str | None = Field(default=None, max_length=255)


class OfferwallEarningsResponse(BaseModel):
    success: bool
    amount: int
    gem_balance: int


def _user_not_found() -> HTTPException:
    return HTTPException(status_code=404, detail=error_detail("E_USER_NOT_FOUND", "User not found"))


@router.post("/api/offerwall/complete", response_model=OfferCompleteResponse)
async def complete_offer(
    payload: OfferCompleteRequest,
    request: Request,
    user: User = Depends(get_current_user),
) -> OfferCompleteResponse:
    context = build_request_context(
        request,
        trusted_proxies=get_settings().internal_api_trusted_proxies,
    )
    try:
        async with SessionLocal.begin() as session:
            result = await OfferwallService.complete_offer(
                session,
                user_id=user.id,
                offer_id=payload.offer_id,
                provider=payload.provider,
                reward=payload.reward,
                title=payload.title,
                now_utc=datetime.now(timezone.utc),
                context=context,
            )
    except OfferwallUserNotFoundError as exc:
        raise _user_not_found() from exc
    return OfferCompleteResponse(success=True, reward=result.amount, gem_balance=result.gem_balance)


@router.post("/api/offerwall/earnings", response_model=OfferwallEarningsResponse)
async def record_earnings(
    payload: OfferwallEarningsRequest,
    request: Request,
    user: User = Depends(get_current_user),
) -> OfferwallEarningsResponse:
    context = build_request_context(
        request,
        trusted_proxies=get_settings().internal_api_trusted_proxies,
    )
    try:
        async with SessionLocal.begin() as session:
            result = await OfferwallService.record_earnings(
                session,
                user_id=user.id,
                amount=payload.amount,
                description=payload.description,
                now_utc=datetime.now(timezone.utc),
                context=context,
            )
    except OfferwallUserNotFoundError as exc:
        raise _user_not_found() from exc
    return OfferwallEarningsResponse(success=True, amount=result.amount, gem_balance=result.gem_balance)
