"""Election state repository - key/value rows merged key by key."""

from datetime import datetime, timezone

from loguru import logger

from app.models.audit import AuditAction
from app.models.election import STATE_SCHEMA, ElectionState, StateEntry
from app.repositories.access import AccessPolicy
from app.repositories.base import BaseRepository
from sheets_client import SheetsClient


class ElectionStateRepository(BaseRepository[StateEntry]):
    entity = "state"

    def __init__(self, client: SheetsClient, policy: AccessPolicy, audit=None):
        super().__init__(client, policy, STATE_SCHEMA, audit)

    async def load(self) -> ElectionState:
        """Typed state; missing keys take their defaults, unknown keys land in `extras`."""
        return ElectionState.from_entries(await self.items())

    async def merge(self, values: dict[str, str]) -> None:
        """Write only the given keys.

        Existing keys are rewritten in place with one batch update, new keys
        are appended. Rows for other keys are never touched.
        """
        if not values:
            return
        self._policy.require_administrator("change the election state")
        now = datetime.now(timezone.utc).isoformat(timespec="seconds")

        existing = await self.all()
        seen: set[str] = set()
        pairs = []
        for stored in existing:
            key = stored.item.key
            if key in values:
                seen.add(key)
                if stored.item.value != values[key]:
                    pairs.append((stored, StateEntry(key=key, value=values[key], updated_at=now)))
        new = [StateEntry(key=k, value=v, updated_at=now) for k, v in values.items() if k not in seen]

        await self.batch_update(pairs, action=AuditAction.CONFIG)
        await self.append(new, action=AuditAction.CONFIG)
        logger.info("Election state merged: {} updated, {} added", len(pairs), len(new))

    async def save(self, state: ElectionState, keys: list[str] | None = None) -> None:
        """Merge the known keys of `state` (or just `keys`)."""
        cells = state.to_cells()
        if keys is not None:
            cells = {k: cells[k] for k in keys}
        await self.merge(cells)
