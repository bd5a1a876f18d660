"""Append-only audit trail rows."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from app.models.common.schema import Column, Kind, TableSchema
from app.models.common.tables import Table


class AuditAction(StrEnum):
    """Closed set of audited action kinds."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    VALIDATE = "VALIDATE"
    CALCULATE = "CALCULATE"
    CONFIG = "CONFIG"
    LOCK = "LOCK"
    UNLOCK = "UNLOCK"
    TRANSITION = "TRANSITION"
    RESET = "RESET"
    QUALIFY = "QUALIFY"
    EXPORT = "EXPORT"


class AuditEntry(BaseModel):
    timestamp: str
    action: AuditAction
    entity: str = ""
    entity_id: str = ""
    before: Any = Field(default_factory=dict)
    after: Any = Field(default_factory=dict)
    actor: str = ""


AUDIT_SCHEMA = TableSchema(
    table=Table.AUDIT_LOG,
    model=AuditEntry,
    columns=(
        Column("timestamp"),
        Column("action"),
        Column("entity"),
        Column("entity_id"),
        Column("before", Kind.JSON),
        Column("after", Kind.JSON),
        Column("actor"),
    ),
)
