from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, StringConstraints

from survey_gems.api.auth_gate import get_current_user
from survey_gems.api.errors import error_detail
from survey_gems.api.routes.public_models import WithdrawalResponse
from survey_gems.core.config import get_settings
from survey_gems.db.models.users import User
from survey_gems.db.session import SessionLocal
from survey_gems.economy.withdrawals.errors import (
    PendingWithdrawalExistsError,
    WithdrawalBelowMinimumError,
    WithdrawalInsufficientBalanceError,
    WithdrawalUserNotFoundError,
)
from survey_gems.economy.withdrawals.service import WithdrawalService
from survey_gems.services.internal_auth import build_request_context

router = APIRouter(tags=["withdrawals"])


class WithdrawalCreateRequest(BaseModel):
    amount: int = Field(gt=0)
    wallet_address: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


@router.post("/api/withdrawals", response_model=WithdrawalResponse)
async def create_withdrawal(
    payload: WithdrawalCreateRequest,
    request: Request,
    user: User = Depends(get_current_user),
) -> WithdrawalResponse:
    settings = get_settings()
    context = build_request_context(request, trusted_proxies=settings.internal_api_trusted_proxies)
    try:
        async with SessionLocal.begin() as session:
            result = await WithdrawalService.request_withdrawal(
                session,
                user_id=user.id,
                amount=payload.amount,
                wallet_address=payload.wallet_address,
                now_utc=datetime.now(timezone.utc),
                min_amount=settings.min_withdrawal_gems,
                context=context,
            )
    except WithdrawalUserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=error_detail("E_USER_NOT_FOUND", "User not found")) from exc
    except PendingWithdrawalExistsError as exc:
        raise HTTPException(
            status_code=400,
            detail=error_detail("E_WITHDRAWAL_PENDING", "You already have a pending withdrawal request"),
        ) from exc
    except WithdrawalInsufficientBalanceError as exc:
        raise HTTPException(
            status_code=400,
            detail=error_detail("E_INSUFFICIENT_BALANCE", "Insufficient balance"),
        ) from exc
    except WithdrawalBelowMinimumError as exc:
        raise HTTPException(
            status_code=400,
            detail=error_detail("E_WITHDRAWAL_BELOW_MINIMUM", f"Minimum withdrawal is {exc.min_amount} gems"),
        ) from exc

    return WithdrawalResponse.model_validate(result.withdrawal)


@router.get("/api/withdrawals/pending", response_model=WithdrawalResponse | None)
async def get_pending_withdrawal(user: User = Depends(get_current_user)) -> WithdrawalResponse | None:
    async with SessionLocal.begin() as session:
        withdrawal = await WithdrawalService.get_pending_for_user(session, user.id)
    if withdrawal is None:
        return None
    return WithdrawalResponse.model_validate(withdrawal)
