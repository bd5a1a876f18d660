"""Domain errors raised by repositories and services.

Infrastructure failures (auth, quota, network, schema mismatch) live in
`sheets_client.exceptions` and propagate unchanged.
"""


class DomainError(Exception):
    """Base error for business rule violations."""

    def __init__(self, message: str = "Domain error"):
        self.message = message
        super().__init__(self.message)


class PermissionDenied(DomainError):
    """Actor's role or bound precinct does not allow the operation."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


class RoundLocked(PermissionDenied):
    """Write attempted on a locked round."""

    def __init__(self, round_: int):
        self.round = round_
        super().__init__(f"Round {round_} is locked")


class ManualDecisionRequired(DomainError):
    """Tie for a qualifying position; an administrator must decide."""

    def __init__(self, tied: list[str], message: str | None = None):
        self.tied = list(tied)
        super().__init__(message or f"Tie for the last qualifying position: {', '.join(self.tied)}")


class TransitionRejected(DomainError):
    """Event not allowed from the current phase, or a guard failed."""

    def __init__(self, phase: str, event: str, reason: str):
        self.phase = phase
        self.event = event
        self.reason = reason
        super().__init__(f"{event} rejected in {phase}: {reason}")


class AllocationError(DomainError):
    """Seat allocation cannot produce a complete, valid distribution."""

    def __init__(self, message: str = "Seat allocation failed"):
        super().__init__(message)
