from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.models.sessions import Session


class SessionsRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        sid: str,
        sess: dict[str, object],
        expire: datetime,
    ) -> Session:
        row = Session(sid=sid, sess=sess, expire=expire)
        session.add(row)
        await session.flush()
        return row

    @staticmethod
    async def get_active(session: AsyncSession, sid: str, *, now_utc: datetime) -> Session | None:
        stmt = select(Session).where(Session.sid == sid, Session.expire > now_utc)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def delete(session: AsyncSession, sid: str) -> int:
        result = await session.execute(delete(Session).where(Session.sid == sid))
        return result.rowcount or 0

    @staticmethod
    async def delete_expired(session: AsyncSession, *, now_utc: datetime) -> int:
        result = await session.execute(delete(Session).where(Session.expire <= now_utc))
        return result.rowcount or 0
