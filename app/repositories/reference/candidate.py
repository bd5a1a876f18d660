"""Candidate list repository."""

from loguru import logger

from app.models.common import check_round
from app.models.reference import CANDIDATE_SCHEMA, CandidateList
from app.repositories.access import AccessPolicy
from app.repositories.base import BaseRepository
from sheets_client import SheetsClient


class CandidateListRepository(BaseRepository[CandidateList]):
    entity = "list"

    def __init__(self, client: SheetsClient, policy: AccessPolicy, audit=None):
        super().__init__(client, policy, CANDIDATE_SCHEMA, audit)

    async def ordered(self) -> list[CandidateList]:
        """All lists in ballot order."""
        return sorted(await self.items(), key=lambda c: (c.order, c.list_id))

    async def active_in(self, round_: int) -> list[CandidateList]:
        check_round(round_)
        return [c for c in await self.ordered() if c.active_in(round_)]

    async def set_round2(self, qualified_ids: list[str]) -> int:
        """Mark exactly `qualified_ids` as active in round 2, all others inactive.

        All rows are rewritten in one batch update. Returns the number of rows written.
        """
        wanted = set(qualified_ids)
        stored = await self.all()
        pairs = [(s, s.item.model_copy(update={"active_round2": s.item.list_id in wanted})) for s in stored]
        missing = wanted - {s.item.list_id for s in stored}
        if missing:
            logger.warning("Qualified lists not found in {}: {}", self.table, sorted(missing))
        await self.batch_update(pairs)
        return len(pairs)
