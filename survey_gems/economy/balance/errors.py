class BalanceError(Exception):
    pass


class BalanceUserNotFoundError(BalanceError):
    pass


class InsufficientBalanceError(BalanceError):
    pass
