"""Repositories package - filtered, audited access to the spreadsheet tables."""

from app.repositories.access import AccessPolicy, Actor, Role
from app.repositories.audit import AuditEmitter, AuditRepository
from app.repositories.base import BaseRepository
from app.repositories.election import ElectionStateRepository
from app.repositories.reference import CandidateListRepository, PrecinctRepository
from app.repositories.seats import SeatRepository
from app.repositories.tally import ParticipationRepository, ResultRepository

__all__ = [
    # Access
    "Role",
    "Actor",
    "AccessPolicy",
    # Base
    "BaseRepository",
    # Audit
    "AuditEmitter",
    "AuditRepository",
    # Reference
    "PrecinctRepository",
    "CandidateListRepository",
    # Tally
    "ParticipationRepository",
    "ResultRepository",
    # Election
    "ElectionStateRepository",
    # Seats
    "SeatRepository",
]
