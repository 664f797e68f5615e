from __future__ import annotations

from fastapi import APIRouter, Depends

from survey_gems.api.auth_gate import get_current_user
from survey_gems.api.routes.public_models import TransactionResponse
from survey_gems.core.config import get_settings
from survey_gems.db.models.users import User
from survey_gems.db.repo.transactions_repo import TransactionsRepo
from survey_gems.db.session import SessionLocal

router = APIRouter(tags=["transactions"])


@router.get("/api/transactions", response_model=list[TransactionResponse])
async def list_transactions(user: User = Depends(get_current_user)) -> list[TransactionResponse]:
    async with SessionLocal.begin() as session:
        transactions = await TransactionsRepo.list_recent_by_user(
            session,
            user.id,
            limit=get_settings().transactions_page_size,
        )
    return [TransactionResponse.model_validate(item) for item in transactions]
