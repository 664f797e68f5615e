from __future__ import annotations

from datetime import datetime, timedelta, timezone

import structlog
from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel, Field

from survey_gems.api.errors import error_detail
from survey_gems.api.routes.public_models import UserResponse
from survey_gems.core.config import get_settings
from survey_gems.db.session import SessionLocal
from survey_gems.services.internal_auth import (
    INTERNAL_TOKEN_HEADER,
    build_request_context,
    extract_client_ip,
    is_client_ip_allowed,
    is_valid_internal_token,
)
from survey_gems.services.user_onboarding import (
    SignInEmailConflictError,
    UserOnboardingService,
    VerifiedIdentity,
)

router = APIRouter(tags=["internal", "auth"])
logger = structlog.get_logger(__name__)


class SignInRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=64)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    profile_image_url: str | None = Field(default=None, max_length=1024)
    email_verified: bool = False


class SignInResponse(BaseModel):
    user: UserResponse
    created: bool
    session_token: str
    expires_at: datetime


def _assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(request, trusted_proxies=settings.internal_api_trusted_proxies)

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_auth_rejected", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail=error_detail("E_FORBIDDEN", "Forbidden"))

    if not is_valid_internal_token(
        expected_token=settings.internal_api_token,
        received_token=request.headers.get(INTERNAL_TOKEN_HEADER),
    ):
        logger.warning("internal_auth_rejected", reason="invalid_credentials", client_ip=client_ip)
        raise HTTPException(status_code=403, detail=error_detail("E_FORBIDDEN", "Forbidden"))


@router.post("/internal/auth/sign-in", response_model=SignInResponse)
async def sign_in(payload: SignInRequest, request: Request, response: Response) -> SignInResponse:
    _assert_internal_access(request)
    settings = get_settings()
    now_utc = datetime.now(timezone.utc)
    ttl = timedelta(hours=settings.session_ttl_hours)

    try:
        async with SessionLocal.begin() as session:
            result = await UserOnboardingService.sign_in(
                session,
                identity=VerifiedIdentity(
                    user_id=payload.user_id,
                    email=payload.email,
                    first_name=payload.first_name,
                    last_name=payload.last_name,
                    profile_image_url=payload.profile_image_url,
                    email_verified=payload.email_verified,
                ),
                admin_emails=settings.admin_email_set,
                session_ttl=ttl,
                now_utc=now_utc,
                context=build_request_context(
                    request,
                    trusted_proxies=settings.internal_api_trusted_proxies,
                ),
            )
    except SignInEmailConflictError as exc:
        raise HTTPException(
            status_code=409,
            detail=error_detail("E_EMAIL_CONFLICT", "Email is already bound to another user"),
        ) from exc

    response.set_cookie(
        settings.session_cookie_name,
        result.session.token,
        max_age=int(ttl.total_seconds()),
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )
    return SignInResponse(
        user=UserResponse.model_validate(result.user),
        created=result.created,
        session_token=result.session.token,
        expires_at=result.session.expires_at,
    )
