"""Table identifiers (sheet names)."""

from enum import StrEnum

ROUNDS = (1, 2)


def check_round(round_: int) -> int:
    if round_ not in ROUNDS:
        raise ValueError(f"Invalid round: {round_}. Must be 1 or 2")
    return round_


class Table(StrEnum):
    PRECINCTS = "Precincts"
    LISTS = "Lists"
    PARTICIPATION_R1 = "Participation_R1"
    PARTICIPATION_R2 = "Participation_R2"
    RESULTS_R1 = "Results_R1"
    RESULTS_R2 = "Results_R2"
    ELECTION_STATE = "ElectionState"
    SEATS_MUNICIPAL = "Seats_Municipal"
    SEATS_COMMUNITY = "Seats_Community"
    AUDIT_LOG = "AuditLog"

    @classmethod
    def participation(cls, round_: int) -> "Table":
        return cls.PARTICIPATION_R1 if check_round(round_) == 1 else cls.PARTICIPATION_R2

    @classmethod
    def results(cls, round_: int) -> "Table":
        return cls.RESULTS_R1 if check_round(round_) == 1 else cls.RESULTS_R2


PRECINCT_SCOPED = frozenset(
    {Table.PARTICIPATION_R1, Table.PARTICIPATION_R2, Table.RESULTS_R1, Table.RESULTS_R2}
)
REFERENCE = frozenset({Table.PRECINCTS, Table.LISTS})
