"""Tally entities - computed consolidation results."""

from dataclasses import dataclass, field
from enum import StrEnum

from app.models.common import BaseEntity
from app.models.tally.result import ResultRecord


class FlagKind(StrEnum):
    """Advisory anomalies. Reported alongside results, never raised."""

    TURNOUT_MISMATCH = "TURNOUT_MISMATCH"  # turnout != blank + null + expressed
    VOTES_MISMATCH = "VOTES_MISMATCH"  # sum(votes) != expressed
    TURNOUT_EXCEEDS_REGISTERED = "TURNOUT_EXCEEDS_REGISTERED"
    DECREASING_SAMPLE = "DECREASING_SAMPLE"
    SAMPLE_EXCEEDS_REGISTERED = "SAMPLE_EXCEEDS_REGISTERED"


@dataclass
class ReconciliationFlag(BaseEntity):
    precinct_id: str
    kind: FlagKind
    expected: int
    actual: int
    detail: str = ""


@dataclass
class CommunalTotals(BaseEntity):
    registered: int = 0
    turnout: int = 0
    blank: int = 0
    null: int = 0
    expressed: int = 0

    @property
    def participation_pct(self) -> float:
        return self.turnout / self.registered * 100 if self.registered else 0.0

    @property
    def abstention(self) -> int:
        return max(0, self.registered - self.turnout)

    @property
    def abstention_pct(self) -> float:
        return self.abstention / self.registered * 100 if self.registered else 0.0

    @property
    def blank_pct(self) -> float:
        return self.blank / self.turnout * 100 if self.turnout else 0.0

    @property
    def null_pct(self) -> float:
        return self.null / self.turnout * 100 if self.turnout else 0.0


@dataclass
class ListTotal(BaseEntity):
    """Communal vote total of one list, ranked."""

    list_id: str
    name: str
    votes: int
    pct_expressed: float = 0.0
    pct_registered: float = 0.0
    order: int = 0
    color: str = ""


@dataclass
class Consolidation(BaseEntity):
    round: int
    totals: CommunalTotals
    ranking: list[ListTotal]
    resolved: list[ResultRecord]
    flags: list[ReconciliationFlag] = field(default_factory=list)
    duplicates_dropped: int = 0
    precincts_reported: int = 0
    precincts_total: int = 0

    @property
    def lead_gap(self) -> int | None:
        """Vote gap between the two leading lists."""
        if len(self.ranking) < 2:
            return None
        return self.ranking[0].votes - self.ranking[1].votes


@dataclass
class HourlyTurnout(BaseEntity):
    hour: str
    turnout: int
    registered: int
    pct: float


@dataclass
class ParticipationSummary(BaseEntity):
    round: int
    registered: int
    turnout: int
    pct: float
    timeline: list[HourlyTurnout] = field(default_factory=list)
    flags: list[ReconciliationFlag] = field(default_factory=list)
    precincts_reported: int = 0
