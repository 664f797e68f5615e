from __future__ import annotations

from dataclasses import dataclass

from survey_gems.db.models.transactions import Transaction
from survey_gems.db.models.withdrawal_requests import WithdrawalRequest


@dataclass(slots=True)
class WithdrawalRequestResult:
    withdrawal: WithdrawalRequest
    transaction: Transaction
    gem_balance: int


@dataclass(slots=True)
class WithdrawalDecisionResult:
    withdrawal: WithdrawalRequest
    transaction: Transaction
    user_gem_balance: int
