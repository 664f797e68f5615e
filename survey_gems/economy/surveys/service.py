from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.core.security_events import RequestContext, emit_security_event
from survey_gems.db.models.survey_responses import SurveyResponse
from survey_gems.db.models.surveys import Survey
from survey_gems.db.repo.survey_responses_repo import SurveyResponsesRepo
from survey_gems.db.repo.surveys_repo import SurveysRepo
from survey_gems.economy.balance.service import BalanceService
from survey_gems.economy.surveys.errors import (
    SurveyAlreadyCompletedError,
    SurveyInactiveError,
    SurveyNotFoundError,
)
from survey_gems.economy.surveys.types import SurveyCompletionResult

logger = structlog.get_logger(__name__)


class SurveyService:
    @staticmethod
    async def list_active(session: AsyncSession) -> list[Survey]:
        return await SurveysRepo.list_active(session)

    @staticmethod
    async def get_survey(session: AsyncSession, survey_id: int) -> Survey:
        survey = await SurveysRepo.get_by_id(session, survey_id)
        if survey is None:
            raise SurveyNotFoundError
        return survey

    @staticmethod
    async def complete_survey(
        session: AsyncSession,
        *,
        user_id: str,
        survey_id: int,
        responses: dict[str, object],
        now_utc: datetime,
        context: RequestContext | None = None,
    ) -> SurveyCompletionResult:
        survey = await SurveysRepo.get_by_id(session, survey_id)
        if survey is None:
            raise SurveyNotFoundError
        if not survey.is_active:
            raise SurveyInactiveError

        existing = await SurveyResponsesRepo.get_by_user_and_survey(
            session,
            user_id=user_id,
            survey_id=survey_id,
        )
        if existing is not None:
            raise SurveyAlreadyCompletedError

        reward = survey.reward
        try:
            response = await SurveyResponsesRepo.create(
                session,
                response=SurveyResponse(
                    user_id=user_id,
                    survey_id=survey_id,
                    responses=responses,
                    gem_awarded=reward,
                    completed_at=now_utc,
                ),
            )
        except IntegrityError as exc:
            # Lost the race against a concurrent submission for the same pair.
            raise SurveyAlreadyCompletedError from exc

        posting = await BalanceService.credit(
            session,
            user_id=user_id,
            amount=reward,
            transaction_type="survey_reward",
            description=f"Survey completed: {survey.title}",
            survey_id=survey_id,
            now_utc=now_utc,
        )
        await SurveysRepo.increment_participant_count(session, survey_id)
        await emit_security_event(
            session,
            action="survey_completed",
            user_id=user_id,
            details={"survey_id": survey_id, "reward": reward},
            context=context,
            happened_at=now_utc,
        )
        logger.info(
            "survey_completed",
            user_id=user_id,
            survey_id=survey_id,
            reward=reward,
            gem_balance=posting.balance_after,
        )
        return SurveyCompletionResult(
            response=response,
            transaction=posting.transaction,
            gems_earned=reward,
            gem_balance=posting.balance_after,
        )
