from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from survey_gems.api.auth_gate import get_current_user
from survey_gems.api.errors import error_detail
from survey_gems.api.routes.public_models import SurveyModel, SurveyResponseModel
from survey_gems.core.config import get_settings
from survey_gems.db.models.users import User
from survey_gems.db.session import SessionLocal
from survey_gems.economy.surveys.errors import (
    SurveyAlreadyCompletedError,
    SurveyInactiveError,
    SurveyNotFoundError,
)
from survey_gems.economy.surveys.service import SurveyService
from survey_gems.services.internal_auth import build_request_context

router = APIRouter(tags=["surveys"])


class SurveyCompleteRequest(BaseModel):
    responses: dict[str, Any] = Field(default_factory=dict)


class SurveyCompleteResponse(BaseModel):
    response: SurveyResponseModel
    gems_earned: int
    gem_balance: int


def _survey_not_found() -> HTTPException:
    return HTTPException(status_code=404, detail=error_detail("E_SURVEY_NOT_FOUND", "Survey not found"))


@router.get("/api/surveys", response_model=list[SurveyModel])
async def list_surveys(user: User = Depends(get_current_user)) -> list[SurveyModel]:
    async with SessionLocal.begin() as session:
        surveys = await SurveyService.list_active(session)
    return [SurveyModel.model_validate(survey) for survey in surveys]


@router.get("/api/surveys/{survey_id}", response_model=SurveyModel)
async def get_survey(survey_id: int, user: User = Depends(get_current_user)) -> SurveyModel:
    try:
        async with SessionLocal.begin() as session:
            survey = await SurveyService.get_survey(session, survey_id)
    except SurveyNotFoundError as exc:
        raise _survey_not_found() from exc
    return SurveyModel.model_validate(survey)


@router.post("/api/surveys/{survey_id}/complete", response_model=SurveyCompleteResponse)
async def complete_survey(
    survey_id: int,
    payload: SurveyCompleteRequest,
    request: Request,
    user: User = Depends(get_current_user),
) -> SurveyCompleteResponse:
    context = build_request_context(
        request,
        trusted_proxies=get_settings().internal_api_trusted_proxies,
    )
    try:
        async with SessionLocal.begin() as session:
            result = await SurveyService.complete_survey(
                session,
                user_id=user.id,
                survey_id=survey_id,
                responses=payload.responses,
                now_utc=datetime.now(timezone.utc),
                context=context,
            )
    except SurveyNotFoundError as exc:
        raise _survey_not_found() from exc
    except SurveyInactiveError as exc:
        raise HTTPException(
            status_code=400,
            detail=error_detail("E_SURVEY_INACTIVE", "Survey is not active"),
        ) from exc
    except SurveyAlreadyCompletedError as exc:
        raise HTTPException(
            status_code=400,
            detail=error_detail("E_SURVEY_ALREADY_COMPLETED", "Survey already completed"),
        ) from exc

    return SurveyCompleteResponse(
        response=SurveyResponseModel.model_validate(result.response),
        gems_earned=result.gems_earned,
        gem_balance=result.gem_balance,
    )
