"""Fire-and-forget audit trail writer."""

import asyncio
from datetime import datetime, timezone
from typing import Any

from loguru import logger

from app.models.audit import AUDIT_SCHEMA, AuditAction, AuditEntry
from sheets_client import SheetsClient


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class AuditEmitter:
    """Appends audit entries in the background.

    `record` never blocks and never raises: a failed append (missing
    credentials, quota, network) is logged and dropped. Call `drain` before
    closing the session so pending appends get a chance to finish.
    """

    def __init__(self, client: SheetsClient, actor: str = ""):
        self._client = client
        self._actor = actor
        self._pending: set[asyncio.Task] = set()
        self._failures = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def failures(self) -> int:
        return self._failures

    def record(
        self,
        action: AuditAction,
        entity: str,
        entity_id: str = "",
        before: Any = None,
        after: Any = None,
    ) -> None:
        entry = AuditEntry(
            timestamp=_now(),
            action=action,
            entity=entity,
            entity_id=str(entity_id),
            before=before if before is not None else {},
            after=after if after is not None else {},
            actor=self._actor,
        )
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._failures += 1
            logger.warning("Audit entry dropped (no running event loop): {} {}:{}", action, entity, entity_id)
            return

        task = loop.create_task(self._write(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write(self, entry: AuditEntry) -> None:
        try:
            await self._client.append(AUDIT_SCHEMA.table, [AUDIT_SCHEMA.encode(entry)])
            logger.debug("Audit: {} {}:{}", entry.action, entry.entity, entry.entity_id)
        except Exception as e:
            self._failures += 1
            logger.warning("Audit write failed ({} {}:{}): {}", entry.action, entry.entity, entry.entity_id, e)

    async def drain(self) -> None:
        """Wait for every scheduled append, including ones scheduled while waiting."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
