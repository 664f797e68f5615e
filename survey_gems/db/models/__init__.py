from survey_gems.db.models.security_logs import SecurityLog
from survey_gems.db.models.sessions import Session
from survey_gems.db.models.survey_responses import SurveyResponse
from survey_gems.db.models.surveys import Survey
from survey_gems.db.models.transactions import Transaction
from survey_gems.db.models.users import User
from survey_gems.db.models.withdrawal_requests import WithdrawalRequest

__all__ = [
    "SecurityLog",
    "Session",
    "Survey",
    "SurveyResponse",
    "Transaction",
    "User",
    "WithdrawalRequest",
]
