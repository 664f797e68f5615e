from __future__ import annotations

from dataclasses import dataclass

from survey_gems.db.models.transactions import Transaction


@dataclass(slots=True)
class OfferwallCreditResult:
    transaction: Transaction
    amount: int
    gem_balance: int
