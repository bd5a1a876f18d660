"""Seat domain entities - computed distributions."""

from dataclasses import dataclass, field

from app.models.common import BaseEntity
from app.models.seats.allocation import SeatAllocation


@dataclass
class SeatDistribution(BaseEntity):
    """Both councils computed from the same round's totals."""

    round: int
    expressed: int
    municipal: list[SeatAllocation] = field(default_factory=list)
    community: list[SeatAllocation] = field(default_factory=list)

    def seats_of(self, list_id: str) -> tuple[int, int]:
        """(municipal, community) seats of a list."""
        m = next((a.total_seats for a in self.municipal if a.list_id == list_id), 0)
        c = next((a.total_seats for a in self.community if a.list_id == list_id), 0)
        return m, c
