"""Models package - row schemas and entities for all domains."""

from app.models.audit import AUDIT_SCHEMA, AuditAction, AuditEntry
from app.models.common import BaseEntity, Stored, Table, TableSchema
from app.models.election import (
    STATE_SCHEMA,
    ElectionState,
    Phase,
    QualificationOutcome,
    StateEntry,
    TransitionEvent,
    TransitionResult,
)
from app.models.reference import CANDIDATE_SCHEMA, PRECINCT_SCHEMA, CandidateList, Precinct
from app.models.seats import SEATS_COMMUNITY_SCHEMA, SEATS_MUNICIPAL_SCHEMA, SeatAllocation, SeatDistribution
from app.models.tally import (
    PARTICIPATION_R1_SCHEMA,
    PARTICIPATION_R2_SCHEMA,
    RESULTS_R1_SCHEMA,
    RESULTS_R2_SCHEMA,
    CommunalTotals,
    Consolidation,
    FlagKind,
    HourlyTurnout,
    ListTotal,
    ParticipationRecord,
    ParticipationSummary,
    ReconciliationFlag,
    ResultRecord,
)

ALL_SCHEMAS: dict[Table, TableSchema] = {
    s.table: s
    for s in (
        # Reference
        PRECINCT_SCHEMA,
        CANDIDATE_SCHEMA,
        # Tally
        PARTICIPATION_R1_SCHEMA,
        PARTICIPATION_R2_SCHEMA,
        RESULTS_R1_SCHEMA,
        RESULTS_R2_SCHEMA,
        # Election
        STATE_SCHEMA,
        # Seats
        SEATS_MUNICIPAL_SCHEMA,
        SEATS_COMMUNITY_SCHEMA,
        # Audit
        AUDIT_SCHEMA,
    )
}


def schema_for(table: Table | str) -> TableSchema:
    """Codec entry point keyed by table id."""
    try:
        return ALL_SCHEMAS[Table(table)]
    except ValueError as e:
        raise KeyError(f"Unknown table: {table}") from e


__all__ = [
    # Common
    "BaseEntity",
    "Stored",
    "Table",
    "TableSchema",
    "ALL_SCHEMAS",
    "schema_for",
    # Reference
    "Precinct",
    "CandidateList",
    # Tally
    "ParticipationRecord",
    "ResultRecord",
    "FlagKind",
    "ReconciliationFlag",
    "CommunalTotals",
    "ListTotal",
    "Consolidation",
    "HourlyTurnout",
    "ParticipationSummary",
    # Election
    "ElectionState",
    "StateEntry",
    "Phase",
    "TransitionEvent",
    "QualificationOutcome",
    "TransitionResult",
    # Seats
    "SeatAllocation",
    "SeatDistribution",
    # Audit
    "AuditAction",
    "AuditEntry",
]
