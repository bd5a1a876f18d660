"""Candidate list reference table."""

from pydantic import BaseModel, Field

from app.models.common.schema import Column, Kind, TableSchema
from app.models.common.tables import Table, check_round


class CandidateList(BaseModel):
    """Electoral list. Round-2 flag is only changed by the round transition."""

    list_id: str = Field(min_length=1)
    name: str = ""
    head_last_name: str = ""
    head_first_name: str = ""
    color: str = "#0055A4"
    order: int = 0
    active_round1: bool = True
    active_round2: bool = False

    @property
    def display_name(self) -> str:
        if self.name.strip():
            return self.name.strip()
        full = f"{self.head_first_name} {self.head_last_name}".strip()
        return full or self.list_id

    def active_in(self, round_: int) -> bool:
        return self.active_round1 if check_round(round_) == 1 else self.active_round2


CANDIDATE_SCHEMA = TableSchema(
    table=Table.LISTS,
    model=CandidateList,
    columns=(
        Column("list_id"),
        Column("name"),
        Column("head_last_name"),
        Column("head_first_name"),
        Column("color"),
        Column("order", Kind.INT),
        Column("active_round1", Kind.BOOL),
        Column("active_round2", Kind.BOOL),
    ),
)
