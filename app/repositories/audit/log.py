"""Audit log reads (administrators only)."""

from app.models.audit import AUDIT_SCHEMA, AuditAction, AuditEntry
from app.repositories.access import AccessPolicy
from app.repositories.base import BaseRepository
from sheets_client import SheetsClient


class AuditRepository(BaseRepository[AuditEntry]):
    """Read side of the append-only audit table."""

    entity = "audit"

    def __init__(self, client: SheetsClient, policy: AccessPolicy):
        super().__init__(client, policy, AUDIT_SCHEMA)

    async def recent(self, limit: int = 50, action: AuditAction | None = None) -> list[AuditEntry]:
        """Newest first."""
        self._policy.require_administrator("read the audit log")
        entries = await self.items()
        if action is not None:
            entries = [e for e in entries if e.action == action]
        return list(reversed(entries))[:limit]
