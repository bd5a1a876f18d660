"""Base repository - a table seen through the codec, the access policy and the audit trail."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Generic

from loguru import logger
from pydantic import BaseModel

from app.models.audit import AuditAction
from app.models.common import Stored, TableSchema
from app.models.common.base import M
from app.repositories.access import AccessPolicy
from sheets_client import SheetsClient
from sheets_client.ranges import column_letter

if TYPE_CHECKING:
    from app.repositories.audit.emitter import AuditEmitter


def snapshot(value: Any) -> Any:
    """JSON-ready view of a model for before/after audit columns."""
    if value is None:
        return {}
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


class BaseRepository(Generic[M]):
    """Filtered store for one table.

    Reads decode rows and apply the actor's row filter; every mutating path
    checks the policy first and emits an audit entry after the write.
    """

    entity = "row"

    def __init__(
        self,
        client: SheetsClient,
        policy: AccessPolicy,
        schema: TableSchema,
        audit: "AuditEmitter | None" = None,
    ):
        self._client = client
        self._policy = policy
        self._schema = schema
        self._audit = audit
        logger.debug("{} initialized ({})", self.__class__.__name__, schema.table)

    @property
    def table(self) -> str:
        return self._schema.table

    @property
    def schema(self) -> TableSchema:
        return self._schema

    def _key(self, item: BaseModel) -> str:
        return str(getattr(item, self._schema.columns[0].field))

    def _record(self, action: AuditAction, entity_id: str, before: Any = None, after: Any = None) -> None:
        if self._audit is not None:
            self._audit.record(action, self.entity, entity_id, snapshot(before), snapshot(after))

    # ========== Reads ==========

    async def all(self) -> list[Stored[M]]:
        """Decoded, access-filtered rows. Cleared (blank) rows are skipped."""
        rows = await self._client.read(self.table, context=self._policy.context)
        decoded = [
            Stored(row.ref, self._schema.decode(row.values, row.ref.offset))
            for row in rows
            if any(v.strip() for v in row.values)
        ]
        return self._policy.filter(self._schema, decoded)

    async def items(self) -> list[M]:
        return [s.item for s in await self.all()]

    async def find(self, key: str) -> list[Stored[M]]:
        """Rows whose first column equals `key`, in row order."""
        return [s for s in await self.all() if self._key(s.item) == key]

    # ========== Writes ==========

    async def append(self, items: Sequence[M], action: AuditAction = AuditAction.CREATE) -> None:
        if not items:
            return
        self._policy.check_write(self._schema, items)
        await self._client.append(self.table, [self._schema.encode(i) for i in items])
        logger.info("{}: appended {} row(s)", self.table, len(items))
        for item in items:
            self._record(action, self._key(item), after=item)

    async def update(self, stored: Stored[M], item: M, action: AuditAction = AuditAction.UPDATE) -> None:
        self._policy.check_write(self._schema, [stored.item, item])
        await self._client.update(stored.ref, self._schema.encode(item))
        logger.info("{}: updated row {}", self.table, stored.ref.offset)
        self._record(action, self._key(item), before=stored.item, after=item)

    async def batch_update(
        self, pairs: Sequence[tuple[Stored[M], M]], action: AuditAction = AuditAction.UPDATE
    ) -> None:
        """Rewrite several rows in a single store call."""
        if not pairs:
            return
        self._policy.check_write(self._schema, [s.item for s, _ in pairs] + [i for _, i in pairs])
        await self._client.batch_update([(s.ref, self._schema.encode(i)) for s, i in pairs])
        logger.info("{}: batch-updated {} row(s)", self.table, len(pairs))
        for stored, item in pairs:
            self._record(action, self._key(item), before=stored.item, after=item)

    async def delete(self, stored: Stored[M]) -> None:
        self._policy.check_delete(self._schema)
        self._policy.check_write(self._schema, [stored.item])
        await self._client.delete(stored.ref)
        logger.info("{}: cleared row {}", self.table, stored.ref.offset)
        self._record(AuditAction.DELETE, self._key(stored.item), before=stored.item)

    async def replace_all(self, items: Sequence[M], action: AuditAction = AuditAction.UPDATE) -> None:
        """Clear the table, then write the header and `items`."""
        self._policy.check_delete(self._schema)
        self._policy.check_write(self._schema, items)
        header = self._schema.header()
        await self._client.clear_table(self.table)
        await self._client.update_range(self.table, f"A1:{column_letter(len(header) - 1)}1", [header])
        if items:
            await self._client.append(self.table, [self._schema.encode(i) for i in items])
        logger.info("{}: replaced with {} row(s)", self.table, len(items))
        self._record(action, "*", after={"rows": [snapshot(i) for i in items]})
