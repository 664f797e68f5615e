from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    gem_balance: int
    is_verified: bool
    status: str
    is_admin: bool
    created_at: datetime
    updated_at: datetime


class SurveyModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    duration: int
    reward: int
    questions: Any
    is_active: bool
    participant_count: int
    created_at: datetime


class SurveyResponseModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    survey_id: int
    responses: Any
    gem_awarded: int
    completed_at: datetime


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    type: str
    amount: int
    description: str
    survey_id: int | None = None
    withdrawal_id: int | None = None
    offerwall_provider: str | None = None
    offerwall_offer_id: str | None = None
    created_at: datetime


class WithdrawalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    amount: int
    wallet_address: str
    status: str
    admin_notes: str | None = None
    requested_at: datetime
    processed_at: datetime | None = None
    processed_by: str | None = None
