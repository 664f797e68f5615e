MIN_WITHDRAWAL_GEMS = 100

WITHDRAWAL_DECISIONS = frozenset({"approved", "rejected"})
