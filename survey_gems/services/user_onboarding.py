from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from datetime import datetime, timedelta

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.core.security_events import RequestContext, emit_security_event
from survey_gems.db.models.users import User
from survey_gems.db.repo.users_repo import UsersRepo
from survey_gems.services.auth_sessions import AuthSessionService, IssuedSession

logger = structlog.get_logger(__name__)


class SignInEmailConflictError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class VerifiedIdentity:
    user_id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    email_verified: bool = False


@dataclass(slots=True)
class SignInResult:
    user: User
    session: IssuedSession
    created: bool


class UserOnboardingService:
    @staticmethod
    def is_bootstrap_admin(email: str, admin_emails: Collection[str]) -> bool:
        return email.strip().lower() in admin_emails

    @staticmethod
    async def sign_in(
        session: AsyncSession,
        *,
        identity: VerifiedIdentity,
        admin_emails: Collection[str],
        session_ttl: timedelta,
        now_utc: datetime,
        context: RequestContext | None = None,
    ) -> SignInResult:
        email = identity.email.strip().lower()
        try:
            user, created = await UsersRepo.upsert(
                session,
                user_id=identity.user_id,
                email=email,
                first_name=identity.first_name,
                last_name=identity.last_name,
                profile_image_url=identity.profile_image_url,
                grant_admin=UserOnboardingService.is_bootstrap_admin(email, admin_emails),
                now_utc=now_utc,
            )
        except IntegrityError as exc:
            raise SignInEmailConflictError from exc
        if identity.email_verified and not user.is_verified:
            await UsersRepo.mark_verified(session, user.id, now_utc=now_utc)

        issued = await AuthSessionService.issue(
            session,
            user_id=user.id,
            now_utc=now_utc,
            ttl=session_ttl,
        )
        await emit_security_event(
            session,
            action="user_signed_in",
            user_id=user.id,
            details={"created": created, "is_admin": user.is_admin},
            context=context,
            happened_at=now_utc,
        )
        logger.info("user_signed_in", user_id=user.id, created=created, is_admin=user.is_admin)
        return SignInResult(user=user, session=issued, created=created)

    @staticmethod
    async def sign_out(
        session: AsyncSession,
        *,
        token: str | None,
        user_id: str | None,
        now_utc: datetime,
        context: RequestContext | None = None,
    ) -> bool:
        revoked = await AuthSessionService.revoke(session, token=token)
        if revoked and user_id is not None:
            await emit_security_event(
                session,
                action="user_signed_out",
                user_id=user_id,
                context=context,
                happened_at=now_utc,
            )
        return revoked
