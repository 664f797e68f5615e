from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.models.security_logs import SecurityLog


class SecurityLogsRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        user_id: str | None,
        action: str,
        details: dict[str, object] | None,
        ip_address: str | None,
        user_agent: str | None,
        created_at: datetime,
    ) -> SecurityLog:
        entry = SecurityLog(
            user_id=user_id,
            action=action,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=created_at,
        )
        session.add(entry)
        await session.flush()
        return entry

    @staticmethod
    async def list_by_user(
        session: AsyncSession,
        user_id: str,
        *,
        limit: int = 50,
    ) -> list[SecurityLog]:
        stmt = (
            select(SecurityLog)
            .where(SecurityLog.user_id == user_id)
            .order_by(SecurityLog.created_at.desc(), SecurityLog.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
