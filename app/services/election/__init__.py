"""Election services."""

from app.services.election.state_machine import TRANSITIONS, ElectionStateMachine, apply_event

__all__ = [
    "ElectionStateMachine",
    "TRANSITIONS",
    "apply_event",
]
