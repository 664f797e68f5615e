class OfferwallError(Exception):
    pass


class OfferwallUserNotFoundError(OfferwallError):
    pass
