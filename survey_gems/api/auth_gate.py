from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import Depends, HTTPException, Request

from survey_gems.api.errors import error_detail
from survey_gems.core.config import get_settings
from survey_gems.db.models.users import User
from survey_gems.db.repo.users_repo import UsersRepo
from survey_gems.db.session import SessionLocal
from survey_gems.services.auth_sessions import AuthSessionService

logger = structlog.get_logger(__name__)


def read_session_token(request: Request) -> str | None:
    return request.cookies.get(get_settings().session_cookie_name)


async def get_current_user(request: Request) -> User:
    token = read_session_token(request)
    now_utc = datetime.now(timezone.utc)

    user: User | None = None
    async with SessionLocal() as session:
        user_id = await AuthSessionService.resolve_user_id(session, token=token, now_utc=now_utc)
        if user_id is not None:
            user = await UsersRepo.get_by_id(session, user_id)

    if user is None:
        logger.info(
            "auth_gate_rejected",
            reason="no_session" if token is None else "invalid_session",
            path=request.url.path,
        )
        raise HTTPException(status_code=401, detail=error_detail("E_UNAUTHORIZED", "Unauthorized"))

    if user.status != "active":
        logger.warning("auth_gate_rejected", reason="account_inactive", user_id=user.id, status=user.status)
        raise HTTPException(
            status_code=403,
            detail=error_detail("E_ACCOUNT_INACTIVE", f"Account is {user.status}"),
        )
    return user


async def get_current_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        logger.warning("auth_gate_rejected", reason="not_admin", user_id=user.id)
        raise HTTPException(status_code=403, detail=error_detail("E_FORBIDDEN", "Admin access required"))
    return user
