"""Election domain entities - phases, events and computed outcomes."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from app.models.common import BaseEntity
from app.models.tally.entities import ListTotal

if TYPE_CHECKING:
    from app.models.election.state import ElectionState


class Phase(StrEnum):
    ROUND1_OPEN = "ROUND1_OPEN"
    ROUND1_LOCKED = "ROUND1_LOCKED"
    ROUND2_OPEN = "ROUND2_OPEN"
    ROUND2_LOCKED = "ROUND2_LOCKED"


class TransitionEvent(StrEnum):
    LOCK_ROUND1 = "LOCK_ROUND1"
    UNLOCK_ROUND1 = "UNLOCK_ROUND1"
    OPEN_ROUND2 = "OPEN_ROUND2"
    LOCK_ROUND2 = "LOCK_ROUND2"
    UNLOCK_ROUND2 = "UNLOCK_ROUND2"
    RESET_TO_ROUND1 = "RESET_TO_ROUND1"


@dataclass
class QualificationOutcome(BaseEntity):
    """Round-1 outcome: outright winner, or the pair going to round 2."""

    runoff_required: bool
    leader_pct: float
    winner: ListTotal | None = None
    qualified: list[ListTotal] = field(default_factory=list)
    admitted: list[ListTotal] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)

    @property
    def qualified_ids(self) -> list[str]:
        return [q.list_id for q in self.qualified]


@dataclass
class TransitionResult(BaseEntity):
    event: TransitionEvent
    from_phase: Phase
    to_phase: Phase
    state: "ElectionState"
    propagation_error: str | None = None

    @property
    def consistent(self) -> bool:
        return self.propagation_error is None
