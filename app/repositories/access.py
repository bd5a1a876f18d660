"""Role-based row filtering.

This is a process safeguard that keeps honest operators on their own
precinct's rows. It is not a security boundary: anyone holding a valid token
can reach the spreadsheet directly.
"""

import os
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from loguru import logger
from pydantic import BaseModel

from app.errors import PermissionDenied
from app.models.common import PRECINCT_SCOPED, Stored, Table, TableSchema

ADMIN_TABLES = frozenset(
    {
        Table.PRECINCTS,
        Table.LISTS,
        Table.ELECTION_STATE,
        Table.SEATS_MUNICIPAL,
        Table.SEATS_COMMUNITY,
    }
)


class Role(StrEnum):
    PRECINCT_OPERATOR = "PRECINCT_OPERATOR"
    SUPERVISOR = "SUPERVISOR"
    ADMINISTRATOR = "ADMINISTRATOR"


@dataclass(frozen=True)
class Actor:
    """Signed-in user. Operators are bound to exactly one precinct."""

    role: Role
    precinct_id: str | None = None
    email: str = ""

    def __post_init__(self):
        if self.role == Role.PRECINCT_OPERATOR and not self.precinct_id:
            raise ValueError("A precinct operator must be bound to a precinct")

    @classmethod
    def from_env(cls) -> "Actor":
        role = Role(os.getenv("ELECTION_ROLE", Role.SUPERVISOR).strip().upper())
        return cls(
            role=role,
            precinct_id=os.getenv("ELECTION_PRECINCT") or None,
            email=os.getenv("ELECTION_ACTOR", ""),
        )

    @property
    def context(self) -> str:
        """Cache/coalescing key component: role plus bound precinct."""
        if self.role == Role.PRECINCT_OPERATOR:
            return f"{self.role}:{self.precinct_id}"
        return str(self.role)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMINISTRATOR


class AccessPolicy:
    """Applies an actor's role to reads and writes of each table."""

    def __init__(self, actor: Actor):
        self.actor = actor

    @property
    def context(self) -> str:
        return self.actor.context

    def _scoped(self, table: str) -> bool:
        return self.actor.role == Role.PRECINCT_OPERATOR and table in PRECINCT_SCOPED

    def filter(self, schema: TableSchema, rows: list[Stored]) -> list[Stored]:
        """Rows the actor may see. Reference tables are never filtered."""
        if not self._scoped(schema.table):
            return rows
        kept = [r for r in rows if schema.scope_of(r.item) == self.actor.precinct_id]
        logger.debug("Access filter {}: {}/{} rows visible", schema.table, len(kept), len(rows))
        return kept

    def check_write(self, schema: TableSchema, items: Iterable[BaseModel]) -> None:
        """Raise PermissionDenied unless every target row is writable by the actor."""
        if schema.table == Table.AUDIT_LOG:
            raise PermissionDenied("The audit log is written only by the audit emitter")
        if schema.table in ADMIN_TABLES:
            self.require_administrator(f"write {schema.table}")
            return
        if not self._scoped(schema.table):
            return
        for item in items:
            scope = schema.scope_of(item)
            if scope != self.actor.precinct_id:
                raise PermissionDenied(
                    f"Operator of precinct {self.actor.precinct_id} cannot write {schema.table} rows of precinct {scope}"
                )

    def check_delete(self, schema: TableSchema) -> None:
        if schema.table == Table.AUDIT_LOG:
            raise PermissionDenied("The audit log is append-only")
        if schema.table in ADMIN_TABLES:
            self.require_administrator(f"delete from {schema.table}")
        elif self.actor.role == Role.PRECINCT_OPERATOR and schema.table in PRECINCT_SCOPED:
            raise PermissionDenied(f"Precinct operators cannot delete {schema.table} rows")

    def require_administrator(self, action: str = "this operation") -> None:
        if not self.actor.is_admin:
            raise PermissionDenied(f"Administrator role required to {action} (current role: {self.actor.role})")

    def require_role(self, *roles: Role, action: str = "this operation") -> None:
        if self.actor.role not in roles:
            allowed = ", ".join(roles)
            raise PermissionDenied(f"{action} requires one of: {allowed} (current role: {self.actor.role})")
