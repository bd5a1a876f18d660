"""Seat allocation rows (municipal and community councils)."""

from pydantic import BaseModel, Field

from app.models.common.schema import Column, Kind, TableSchema
from app.models.common.tables import Table


class SeatAllocation(BaseModel):
    """Seats won by one list. total_seats == majority_seats + proportional_seats."""

    list_id: str = Field(min_length=1)
    name: str = ""
    votes: int = Field(default=0, ge=0)
    percentage: float = 0.0
    majority_seats: int = Field(default=0, ge=0)
    proportional_seats: int = Field(default=0, ge=0)
    total_seats: int = Field(default=0, ge=0)
    eligible: bool = False

    @property
    def method(self) -> str:
        if self.majority_seats:
            return f"Premium ({self.majority_seats}) + Proportional ({self.proportional_seats})"
        if self.eligible:
            return f"Proportional ({self.proportional_seats})"
        return "Below threshold"


def _schema(table: Table) -> TableSchema:
    return TableSchema(
        table=table,
        model=SeatAllocation,
        columns=(
            Column("list_id"),
            Column("name"),
            Column("votes", Kind.INT),
            Column("percentage", Kind.FLOAT),
            Column("majority_seats", Kind.INT),
            Column("proportional_seats", Kind.INT),
            Column("total_seats", Kind.INT),
            Column("eligible", Kind.BOOL),
        ),
    )


SEATS_MUNICIPAL_SCHEMA = _schema(Table.SEATS_MUNICIPAL)
SEATS_COMMUNITY_SCHEMA = _schema(Table.SEATS_COMMUNITY)
