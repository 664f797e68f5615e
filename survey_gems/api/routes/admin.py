from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from survey_gems.api.auth_gate import get_current_admin
from survey_gems.api.errors import error_detail
from survey_gems.api.routes.public_models import UserResponse, WithdrawalResponse
from survey_gems.core.config import get_settings
from survey_gems.db.models.users import User
from survey_gems.db.session import SessionLocal
from survey_gems.economy.withdrawals.errors import (
    WithdrawalAlreadyProcessedError,
    WithdrawalDecisionInvalidError,
    WithdrawalNotFoundError,
    WithdrawalUserNotFoundError,
)
from survey_gems.economy.withdrawals.service import WithdrawalService
from survey_gems.services.admin_stats import build_admin_stats
from survey_gems.services.internal_auth import build_request_context
from survey_gems.services.user_admin import (
    UserAdminInvalidStatusError,
    UserAdminSelfRoleChangeError,
    UserAdminService,
    UserAdminTargetNotFoundError,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


class AdminStatsResponse(BaseModel):
    total_users: int = Field(ge=0)
    pending_withdrawals: int = Field(ge=0)
    total_payouts: str


class WithdrawalDecisionRequest(BaseModel):
    status: Literal["approved", "rejected"]
    admin_notes: str | None = Field(default=None, max_length=2000)


class WithdrawalDecisionResponse(BaseModel):
    withdrawal: WithdrawalResponse
    user_gem_balance: int


class UserStatusUpdateRequest(BaseModel):
    status: Literal["active", "suspended", "banned"]


class UserRoleUpdateRequest(BaseModel):
    is_admin: bool


def _target_not_found() -> HTTPException:
    return HTTPException(status_code=404, detail=error_detail("E_USER_NOT_FOUND", "User not found"))


@router.get("/users", response_model=list[UserResponse])
async def list_users(admin: User = Depends(get_current_admin)) -> list[UserResponse]:
    async with SessionLocal.begin() as session:
        users = await UserAdminService.list_users(session)
    return [UserResponse.model_validate(user) for user in users]


@router.get("/withdrawals", response_model=list[WithdrawalResponse])
async def list_pending_withdrawals(admin: User = Depends(get_current_admin)) -> list[WithdrawalResponse]:
    async with SessionLocal.begin() as session:
        withdrawals = await WithdrawalService.list_pending(session)
    return [WithdrawalResponse.model_validate(item) for item in withdrawals]


@router.get("/stats", response_model=AdminStatsResponse)
async def get_stats(admin: User = Depends(get_current_admin)) -> AdminStatsResponse:
    async with SessionLocal.begin() as session:
        stats = await build_admin_stats(session, gem_usd_rate=get_settings().gem_usd_rate)
    return AdminStatsResponse(
        total_users=stats.total_users,
        pending_withdrawals=stats.pending_withdrawals,
        total_payouts=stats.total_payouts,
    )


@router.patch("/withdrawals/{withdrawal_id}", response_model=WithdrawalDecisionResponse)
async def decide_withdrawal(
    withdrawal_id: int,
    payload: WithdrawalDecisionRequest,
    request: Request,
    admin: User = Depends(get_current_admin),
) -> WithdrawalDecisionResponse:
    context = build_request_context(
        request,
        trusted_proxies=get_settings().internal_api_trusted_proxies,
    )
    try:
        async with SessionLocal.begin() as session:
            result = await WithdrawalService.adjudicate(
                session,
                withdrawal_id=withdrawal_id,
                decision=payload.status,
                admin_notes=payload.admin_notes,
                admin_user_id=admin.id,
                now_utc=datetime.now(timezone.utc),
                context=context,
            )
    except WithdrawalNotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail=error_detail("E_WITHDRAWAL_NOT_FOUND", "Withdrawal request not found"),
        ) from exc
    except WithdrawalUserNotFoundError as exc:
        raise _target_not_found() from exc
    except WithdrawalAlreadyProcessedError as exc:
        raise HTTPException(
            status_code=400,
            detail=error_detail("E_WITHDRAWAL_ALREADY_PROCESSED", "Withdrawal request already processed"),
        ) from exc
    except WithdrawalDecisionInvalidError as exc:
        raise HTTPException(
            status_code=400,
            detail=error_detail("E_VALIDATION", "Invalid withdrawal decision"),
        ) from exc

    return WithdrawalDecisionResponse(
        withdrawal=WithdrawalResponse.model_validate(result.withdrawal),
        user_gem_balance=result.user_gem_balance,
    )


@router.patch("/users/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: str,
    payload: UserStatusUpdateRequest,
    request: Request,
    admin: User = Depends(get_current_admin),
) -> UserResponse:
    context = build_request_context(
        request,
        trusted_proxies=get_settings().internal_api_trusted_proxies,
    )
    try:
        async with SessionLocal.begin() as session:
            user = await UserAdminService.change_status(
                session,
                target_user_id=user_id,
                status=payload.status,
                admin_user_id=admin.id,
                now_utc=datetime.now(timezone.utc),
                context=context,
            )
    except UserAdminTargetNotFoundError as exc:
        raise _target_not_found() from exc
    except UserAdminInvalidStatusError as exc:
        raise HTTPException(status_code=400, detail=error_detail("E_VALIDATION", "Invalid status")) from exc
    return UserResponse.model_validate(user)


@router.patch("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    payload: UserRoleUpdateRequest,
    request: Request,
    admin: User = Depends(get_current_admin),
) -> UserResponse:
    context = build_request_context(
        request,
        trusted_proxies=get_settings().internal_api_trusted_proxies,
    )
    try:
        async with SessionLocal.begin() as session:
            user = await UserAdminService.change_role(
                session,
                target_user_id=user_id,
                is_admin=payload.is_admin,
                admin_user_id=admin.id,
                now_utc=datetime.now(timezone.utc),
                context=context,
            )
    except UserAdminTargetNotFoundError as exc:
        raise _target_not_found() from exc
    except UserAdminSelfRoleChangeError as exc:
        raise HTTPException(
            status_code=400,
            detail=error_detail("E_SELF_ROLE_CHANGE", "Admins cannot change their own role"),
        ) from exc
    return UserResponse.model_validate(user)
