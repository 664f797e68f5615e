from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response

from survey_gems.api.auth_gate import get_current_user, read_session_token
from survey_gems.api.routes.public_models import UserResponse
from survey_gems.core.config import get_settings
from survey_gems.db.models.users import User
from survey_gems.db.session import SessionLocal
from survey_gems.services.auth_sessions import AuthSessionService
from survey_gems.services.internal_auth import build_request_context
from survey_gems.services.user_onboarding import UserOnboardingService

router = APIRouter(tags=["auth"])


@router.get("/api/auth/user", response_model=UserResponse)
async def get_auth_user(user: User = Depends(get_current_user)) -> User:
    return user


@router.get("/api/auth/logout")
@router.post("/api/auth/logout")
async def logout(request: Request, response: Response) -> dict[str, bool]:
    settings = get_settings()
    token = read_session_token(request)
    now_utc = datetime.now(timezone.utc)
    context = build_request_context(request, trusted_proxies=settings.internal_api_trusted_proxies)

    async with SessionLocal.begin() as session:
        user_id = await AuthSessionService.resolve_user_id(session, token=token, now_utc=now_utc)
        await UserOnboardingService.sign_out(
            session,
            token=token,
            user_id=user_id,
            now_utc=now_utc,
            context=context,
        )

    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"ok": True}
