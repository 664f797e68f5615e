from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import func, select

from survey_gems.core.security_events import RequestContext
from survey_gems.db.models.survey_responses import SurveyResponse
from survey_gems.db.models.transactions import Transaction
from survey_gems.db.repo.security_logs_repo import SecurityLogsRepo
from survey_gems.db.repo.survey_responses_repo import SurveyResponsesRepo
from survey_gems.db.repo.surveys_repo import SurveysRepo
from survey_gems.db.session import SessionLocal
from survey_gems.economy.surveys.errors import (
    SurveyAlreadyCompletedError,
    SurveyInactiveError,
    SurveyNotFoundError,
)
from survey_gems.economy.surveys.service import SurveyService
from tests.db_fixtures import UTC, _create_survey, _create_user, _get_user, _ledger_sum


async def _complete(user_id: str, survey_id: int, *, context: RequestContext | None = None):
    async with SessionLocal.begin() as session:
        return await SurveyService.complete_survey(
            session,
            user_id=user_id,
            survey_id=survey_id,
            responses={"q1": "answer"},
            now_utc=datetime.now(UTC),
            context=context,
        )


async def _count(model) -> int:
    async with SessionLocal() as session:
        return int((await session.execute(select(func.count()).select_from(model))).scalar_one())


@pytest.mark.asyncio
async def test_complete_survey_credits_reward_once(db_schema) -> None:
    user = await _create_user("surveyor")
    survey = await _create_survey(title="Habits", reward=50)

    result = await _complete(
        user.id,
        survey.id,
        context=RequestContext(ip_address="198.51.100.4", user_agent="pytest"),
    )

    assert result.gems_earned == 50
    assert result.gem_balance == 50
    assert result.response.gem_awarded == 50
    assert result.transaction.type == "survey_reward"
    assert result.transaction.amount == 50
    assert result.transaction.survey_id == survey.id
    assert result.transaction.description == "Survey completed: Habits"
    assert (await _get_user(user.id)).gem_balance == 50
    assert await _ledger_sum(user.id) == 50

    async with SessionLocal() as session:
        refreshed = await SurveysRepo.get_by_id(session, survey.id)
        logs = await SecurityLogsRepo.list_by_user(session, user.id)
    assert refreshed is not None
    assert refreshed.participant_count == 1
    assert logs[0].action == "survey_completed"
    assert logs[0].details == {"survey_id": survey.id, "reward": 50}
    assert logs[0].ip_address == "198.51.100.4"


@pytest.mark.asyncio
async def test_second_completion_is_rejected_without_side_effects(db_schema) -> None:
    user = await _create_user("repeat")
    survey = await _create_survey(reward=30)
    await _complete(user.id, survey.id)

    with pytest.raises(SurveyAlreadyCompletedError):
        await _complete(user.id, survey.id)

    assert (await _get_user(user.id)).gem_balance == 30
    assert await _count(Transaction) == 1
    assert await _count(SurveyResponse) == 1


@pytest.mark.asyncio
async def test_concurrent_duplicate_maps_unique_violation_to_already_completed(
    db_schema,
    monkeypatch,
) -> None:
    user = await _create_user("racer")
    survey = await _create_survey(reward=30)
    await _complete(user.id, survey.id)

    async def _no_prior_response(*args, **kwargs):
        return None

    # A concurrent submission that already passed the pre-check.
    monkeypatch.setattr(
        SurveyResponsesRepo,
        "get_by_user_and_survey",
        staticmethod(_no_prior_response),
    )

    with pytest.raises(SurveyAlreadyCompletedError):
        await _complete(user.id, survey.id)

    assert (await _get_user(user.id)).gem_balance == 30
    assert await _ledger_sum(user.id) == 30
    assert await _count(Transaction) == 1
    assert await _count(SurveyResponse) == 1
    async with SessionLocal() as session:
        refreshed = await SurveysRepo.get_by_id(session, survey.id)
    assert refreshed is not None
    assert refreshed.participant_count == 1


@pytest.mark.asyncio
async def test_missing_and_inactive_surveys_are_rejected(db_schema) -> None:
    user = await _create_user("lost")
    inactive = await _create_survey(is_active=False)

    with pytest.raises(SurveyNotFoundError):
        await _complete(user.id, 999_999)
    with pytest.raises(SurveyInactiveError):
        await _complete(user.id, inactive.id)

    assert (await _get_user(user.id)).gem_balance == 0
    assert await _count(Transaction) == 0


@pytest.mark.asyncio
async def test_list_active_and_get_survey(db_schema) -> None:
    active = await _create_survey(title="Active")
    await _create_survey(title="Inactive", is_active=False)

    async with SessionLocal() as session:
        surveys = await SurveyService.list_active(session)
        fetched = await SurveyService.get_survey(session, active.id)
        with pytest.raises(SurveyNotFoundError):
            await SurveyService.get_survey(session, 999_999)

    assert [survey.title for survey in surveys] == ["Active"]
    assert fetched.id == active.id
