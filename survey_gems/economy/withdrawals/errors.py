class WithdrawalError(Exception):
    pass


class WithdrawalUserNotFoundError(WithdrawalError):
    pass


class WithdrawalNotFoundError(WithdrawalError):
    pass


class PendingWithdrawalExistsError(WithdrawalError):
    pass


class WithdrawalInsufficientBalanceError(WithdrawalError):
    pass


class WithdrawalBelowMinimumError(WithdrawalError):
    def __init__(self, min_amount: int) -> None:
        super().__init__(min_amount)
        self.min_amount = min_amount


class WithdrawalAlreadyProcessedError(WithdrawalError):
    pass


class WithdrawalDecisionInvalidError(WithdrawalError):
    pass
