"""Tally repositories - per-round participation and results."""

from app.repositories.tally.participation import ParticipationRepository
from app.repositories.tally.result import ResultRepository

__all__ = [
    "ParticipationRepository",
    "ResultRepository",
]
