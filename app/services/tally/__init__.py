"""Tally services."""

from app.services.tally.consolidation import ResultsConsolidator
from app.services.tally.submission import SubmissionService

__all__ = [
    "ResultsConsolidator",
    "SubmissionService",
]
