from survey_gems.db.repo.security_logs_repo import SecurityLogsRepo
from survey_gems.db.repo.sessions_repo import SessionsRepo
from survey_gems.db.repo.stats_repo import StatsRepo
from survey_gems.db.repo.survey_responses_repo import SurveyResponsesRepo
from survey_gems.db.repo.surveys_repo import SurveysRepo
from survey_gems.db.repo.transactions_repo import TransactionsRepo
from survey_gems.db.repo.users_repo import UsersRepo
from survey_gems.db.repo.withdrawals_repo import WithdrawalsRepo

__all__ = [
    "SecurityLogsRepo",
    "SessionsRepo",
    "StatsRepo",
    "SurveyResponsesRepo",
    "SurveysRepo",
    "TransactionsRepo",
    "UsersRepo",
    "WithdrawalsRepo",
]
