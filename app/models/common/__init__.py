"""Common models - base classes, table ids and the row codec."""

from app.models.common.base import BaseEntity, Stored
from app.models.common.schema import Column, Kind, TableSchema
from app.models.common.tables import PRECINCT_SCOPED, REFERENCE, ROUNDS, Table, check_round

__all__ = [
    "BaseEntity",
    "Stored",
    "Column",
    "Kind",
    "TableSchema",
    "Table",
    "ROUNDS",
    "PRECINCT_SCOPED",
    "REFERENCE",
    "check_round",
]
