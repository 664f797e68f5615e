from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.models.surveys import Survey


class SurveysRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, survey_id: int) -> Survey | None:
        return await session.get(Survey, survey_id)

    @staticmethod
    async def list_active(session: AsyncSession) -> list[Survey]:
        stmt = (
            select(Survey)
            .where(Survey.is_active.is_(True))
            .order_by(Survey.created_at.desc(), Survey.id.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(session: AsyncSession, *, survey: Survey) -> Survey:
        session.add(survey)
        await session.flush()
        return survey

    @staticmethod
    async def increment_participant_count(session: AsyncSession, survey_id: int) -> int | None:
        stmt = (
            update(Survey)
            .where(Survey.id == survey_id)
            .values(participant_count=Survey.participant_count + 1)
            .returning(Survey.participant_count)
        )
        result = await session.execute(stmt)
        count = result.scalar_one_or_none()
        return None if count is None else int(count)
