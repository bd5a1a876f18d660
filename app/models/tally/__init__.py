"""Tally domain models - participation, results and consolidation entities."""

from app.models.tally.entities import (
    CommunalTotals,
    Consolidation,
    FlagKind,
    HourlyTurnout,
    ListTotal,
    ParticipationSummary,
    ReconciliationFlag,
)
from app.models.tally.participation import (
    PARTICIPATION_R1_SCHEMA,
    PARTICIPATION_R2_SCHEMA,
    ParticipationRecord,
)
from app.models.tally.result import RESULTS_R1_SCHEMA, RESULTS_R2_SCHEMA, ResultRecord

__all__ = [
    # Rows
    "ParticipationRecord",
    "PARTICIPATION_R1_SCHEMA",
    "PARTICIPATION_R2_SCHEMA",
    "ResultRecord",
    "RESULTS_R1_SCHEMA",
    "RESULTS_R2_SCHEMA",
    # Entities
    "FlagKind",
    "ReconciliationFlag",
    "CommunalTotals",
    "ListTotal",
    "Consolidation",
    "HourlyTurnout",
    "ParticipationSummary",
]
