"""Hourly cumulative turnout per precinct and round."""

from pydantic import BaseModel, Field, field_validator

from app.models.common.schema import Column, Kind, TableSchema
from app.models.common.tables import Table
from settings import PARTICIPATION_HOURS


class ParticipationRecord(BaseModel):
    """Cumulative voter counts sampled at each hour of PARTICIPATION_HOURS."""

    precinct_id: str = Field(min_length=1)
    round: int = Field(default=1, ge=1, le=2)
    registered: int = Field(default=0, ge=0)
    samples: list[int] = Field(default_factory=lambda: [0] * len(PARTICIPATION_HOURS))
    timestamp: str = ""

    @field_validator("samples")
    @classmethod
    def _fit_hours(cls, v: list[int]) -> list[int]:
        width = len(PARTICIPATION_HOURS)
        if len(v) > width:
            raise ValueError(f"At most {width} hourly samples, got {len(v)}")
        if any(s < 0 for s in v):
            raise ValueError("Hourly samples must be >= 0")
        return list(v) + [0] * (width - len(v))

    def by_hour(self) -> dict[str, int]:
        return dict(zip(PARTICIPATION_HOURS, self.samples))

    def latest(self) -> int:
        """Last non-zero cumulative sample (0 when nothing was reported yet)."""
        for value in reversed(self.samples):
            if value:
                return value
        return 0


def _schema(table: Table) -> TableSchema:
    return TableSchema(
        table=table,
        model=ParticipationRecord,
        columns=(
            Column("precinct_id"),
            Column("round", Kind.INT),
            Column("registered", Kind.INT),
            Column(
                "samples",
                Kind.INT_LIST,
                width=len(PARTICIPATION_HOURS),
                headers=tuple(f"voters_{h}" for h in PARTICIPATION_HOURS),
            ),
            Column("timestamp"),
        ),
        scope_field="precinct_id",
    )


PARTICIPATION_R1_SCHEMA = _schema(Table.PARTICIPATION_R1)
PARTICIPATION_R2_SCHEMA = _schema(Table.PARTICIPATION_R2)
