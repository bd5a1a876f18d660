"""Election state repository."""

from app.repositories.election.state import ElectionStateRepository

__all__ = [
    "ElectionStateRepository",
]
