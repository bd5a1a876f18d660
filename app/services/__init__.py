"""Services package - service class exports."""

from app.services.election import ElectionStateMachine
from app.services.seats import SeatService
from app.services.tally import ResultsConsolidator, SubmissionService

__all__ = [
    "ElectionStateMachine",
    "ResultsConsolidator",
    "SeatService",
    "SubmissionService",
]
