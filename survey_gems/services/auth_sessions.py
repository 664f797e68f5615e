from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.repo.sessions_repo import SessionsRepo


def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


def hash_session_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class IssuedSession:
    token: str
    expires_at: datetime


class AuthSessionService:
    """Opaque cookie sessions kept in the ``sessions`` table.

    Only the sha256 of a token is stored; the raw token lives in the cookie.
    """

    @staticmethod
    async def issue(
        session: AsyncSession,
        *,
        user_id: str,
        now_utc: datetime,
        ttl: timedelta,
    ) -> IssuedSession:
        token = generate_session_token()
        expires_at = now_utc + ttl
        await SessionsRepo.create(
            session,
            sid=hash_session_token(token),
            sess={"user_id": user_id, "issued_at": now_utc.isoformat()},
            expire=expires_at,
        )
        return IssuedSession(token=token, expires_at=expires_at)

    @staticmethod
    async def resolve_user_id(
        session: AsyncSession,
        *,
        token: str | None,
        now_utc: datetime,
    ) -> str | None:
        if not token:
            return None
        row = await SessionsRepo.get_active(session, hash_session_token(token), now_utc=now_utc)
        if row is None:
            return None
        user_id = row.sess.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            return None
        return user_id

    @staticmethod
    async def revoke(session: AsyncSession, *, token: str | None) -> bool:
        if not token:
            return False
        return await SessionsRepo.delete(session, hash_session_token(token)) > 0

    @staticmethod
    async def purge_expired(session: AsyncSession, *, now_utc: datetime) -> int:
        return await SessionsRepo.delete_expired(session, now_utc=now_utc)
