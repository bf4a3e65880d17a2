# dinnerpair/domain/errors.py
"""
Error taxonomy for pairing, venue assignment and availability matching.

All errors derive from ValueError, matching how the rest of the code base
signals business-rule violations.
"""


class PairingError(ValueError):
    pass


class EmptyGroupError(PairingError):
    def __init__(self, member_count: int = 0):
        self.member_count = member_count
        super().__init__(
            f"Cannot generate pairs: no members ({member_count}); add members before generating pairs"
        )


class InsufficientMembersError(PairingError):
    def __init__(self, member_count: int = 1):
        self.member_count = member_count
        super().__init__(
            f"Cannot generate pairs: only {member_count} member; need at least 2"
        )


class NoVenuesInCityError(PairingError):
    def __init__(self, city):
        self.city = city
        super().__init__(f"No venues found in city: {city}")


class UpstreamReadError(PairingError):
    pass


class PersistenceError(PairingError):
    """
    A pairing run failed before anything was committed.
    """


class PartialPersistenceError(PairingError):
    """
    Some, but not all, records of a pairing run were committed.
    `result` holds what was written and the list of failures.
    """

    def __init__(self, result):
        self.result = result
        super().__init__(
            f"Pairing run for group {result.group_id} partially persisted: "
            f"{len(result.matches)} matches committed, {len(result.failures)} failed"
        )


class MatchResolutionError(PairingError):
    pass
