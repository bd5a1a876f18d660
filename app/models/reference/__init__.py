"""Reference data - precincts and candidate lists."""

from app.models.reference.candidate import CANDIDATE_SCHEMA, CandidateList
from app.models.reference.precinct import PRECINCT_SCHEMA, Precinct

__all__ = [
    "Precinct",
    "PRECINCT_SCHEMA",
    "CandidateList",
    "CANDIDATE_SCHEMA",
]
