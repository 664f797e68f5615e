from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.models.survey_responses import SurveyResponse


class SurveyResponsesRepo:
    @staticmethod
    async def create(session: AsyncSession, *, response: SurveyResponse) -> SurveyResponse:
        session.add(response)
        await session.flush()
        return response

    @staticmethod
    async def list_by_user(session: AsyncSession, user_id: str) -> list[SurveyResponse]:
        stmt = (
            select(SurveyResponse)
            .where(SurveyResponse.user_id == user_id)
            .order_by(SurveyResponse.completed_at.desc(), SurveyResponse.id.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_by_user_and_survey(
        session: AsyncSession,
        *,
        user_id: str,
        survey_id: int,
    ) -> SurveyResponse | None:
        stmt = select(SurveyResponse).where(
            SurveyResponse.user_id == user_id,
            SurveyResponse.survey_id == survey_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
