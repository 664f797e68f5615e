class SurveyError(Exception):
    pass


class SurveyNotFoundError(SurveyError):
    pass


class SurveyInactiveError(SurveyError):
    pass


class SurveyAlreadyCompletedError(SurveyError):
    pass
