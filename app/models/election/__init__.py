"""Election domain models - state, phases and round-2 qualification."""

from app.models.election.entities import Phase, QualificationOutcome, TransitionEvent, TransitionResult
from app.models.election.state import STATE_SCHEMA, ElectionState, StateEntry

__all__ = [
    "Phase",
    "TransitionEvent",
    "QualificationOutcome",
    "TransitionResult",
    "ElectionState",
    "StateEntry",
    "STATE_SCHEMA",
]
