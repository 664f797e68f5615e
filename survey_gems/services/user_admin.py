from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.core.security_events import RequestContext, emit_security_event
from survey_gems.db.models.users import USER_STATUSES, User
from survey_gems.db.repo.users_repo import UsersRepo

logger = structlog.get_logger(__name__)


class UserAdminError(Exception):
    pass


class UserAdminTargetNotFoundError(UserAdminError):
    pass


class UserAdminInvalidStatusError(UserAdminError):
    pass


class UserAdminSelfRoleChangeError(UserAdminError):
    pass


class UserAdminService:
    @staticmethod
    async def list_users(session: AsyncSession) -> list[User]:
        return await UsersRepo.list_all(session)

    @staticmethod
    async def change_status(
        session: AsyncSession,
        *,
        target_user_id: str,
        status: str,
        admin_user_id: str,
        now_utc: datetime,
        context: RequestContext | None = None,
    ) -> User:
        if status not in USER_STATUSES:
            raise UserAdminInvalidStatusError

        user = await UsersRepo.update_status(session, target_user_id, status, now_utc=now_utc)
        if user is None:
            raise UserAdminTargetNotFoundError

        await emit_security_event(
            session,
            action="user_status_changed",
            user_id=admin_user_id,
            details={"target_user_id": target_user_id, "new_status": status},
            context=context,
            happened_at=now_utc,
        )
        logger.info(
            "user_status_changed",
            admin_user_id=admin_user_id,
            target_user_id=target_user_id,
            new_status=status,
        )
        return user

    @staticmethod
    async def change_role(
        session: AsyncSession,
        *,
        target_user_id: str,
        is_admin: bool,
        admin_user_id: str,
        now_utc: datetime,
        context: RequestContext | None = None,
    ) -> User:
        if target_user_id == admin_user_id:
            raise UserAdminSelfRoleChangeError

        user = await UsersRepo.set_admin(session, target_user_id, is_admin, now_utc=now_utc)
        if user is None:
            raise UserAdminTargetNotFoundError

        await emit_security_event(
            session,
            action="user_role_changed",
            user_id=admin_user_id,
            details={"target_user_id": target_user_id, "is_admin": is_admin},
            context=context,
            happened_at=now_utc,
        )
        logger.info(
            "user_role_changed",
            admin_user_id=admin_user_id,
            target_user_id=target_user_id,
            is_admin=is_admin,
        )
        return user
