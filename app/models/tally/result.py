"""Precinct result sheet (procès-verbal) per round."""

from pydantic import BaseModel, Field, field_validator

from app.models.common.schema import Column, Kind, TableSchema
from app.models.common.tables import Table


class ResultRecord(BaseModel):
    """Counted ballots of one precinct.

    Several physical rows may exist for the same (precinct, round); the
    consolidator resolves them.
    """

    precinct_id: str = Field(min_length=1)
    round: int = Field(default=1, ge=1, le=2)
    registered: int = Field(default=0, ge=0)
    turnout: int = Field(default=0, ge=0)
    blank: int = Field(default=0, ge=0)
    null: int = Field(default=0, ge=0)
    expressed: int = Field(default=0, ge=0)
    votes: dict[str, int] = Field(default_factory=dict)
    submitter: str = ""
    validator: str = ""
    timestamp: str = ""

    @field_validator("votes")
    @classmethod
    def _non_negative(cls, v: dict[str, int]) -> dict[str, int]:
        bad = [k for k, n in v.items() if n < 0]
        if bad:
            raise ValueError(f"Negative votes for {bad}")
        return v

    @property
    def votes_total(self) -> int:
        return sum(self.votes.values())

    @property
    def validated(self) -> bool:
        return bool(self.validator)


def _schema(table: Table) -> TableSchema:
    return TableSchema(
        table=table,
        model=ResultRecord,
        columns=(
            Column("precinct_id"),
            Column("round", Kind.INT),
            Column("registered", Kind.INT),
            Column("turnout", Kind.INT),
            Column("blank", Kind.INT),
            Column("null", Kind.INT),
            Column("expressed", Kind.INT),
            Column("votes", Kind.JSON),
            Column("submitter"),
            Column("validator"),
            Column("timestamp"),
        ),
        scope_field="precinct_id",
    )


RESULTS_R1_SCHEMA = _schema(Table.RESULTS_R1)
RESULTS_R2_SCHEMA = _schema(Table.RESULTS_R2)
