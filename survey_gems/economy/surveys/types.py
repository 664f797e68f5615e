from __future__ import annotations

from dataclasses import dataclass

from survey_gems.db.models.survey_responses import SurveyResponse
from survey_gems.db.models.transactions import Transaction


@dataclass(slots=True)
class SurveyCompletionResult:
    response: SurveyResponse
    transaction: Transaction
    gems_earned: int
    gem_balance: int
