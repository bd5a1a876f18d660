"""Reference data repositories."""

from app.repositories.reference.candidate import CandidateListRepository
from app.repositories.reference.precinct import PrecinctRepository

__all__ = [
    "PrecinctRepository",
    "CandidateListRepository",
]
