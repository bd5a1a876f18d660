"""Precinct (polling location) reference table."""

from pydantic import BaseModel, Field

from app.models.common.schema import Column, Kind, TableSchema
from app.models.common.tables import Table


class Precinct(BaseModel):
    """Polling location with its own voter roll."""

    id: str = Field(min_length=1)
    name: str = ""
    address: str = ""
    president: str = ""
    secretary: str = ""
    deputy_secretary: str = ""
    registered: int = Field(default=0, ge=0)
    active: bool = True


PRECINCT_SCHEMA = TableSchema(
    table=Table.PRECINCTS,
    model=Precinct,
    columns=(
        Column("id"),
        Column("name"),
        Column("address"),
        Column("president"),
        Column("secretary"),
        Column("deputy_secretary"),
        Column("registered", Kind.INT),
        Column("active", Kind.BOOL),
    ),
)
