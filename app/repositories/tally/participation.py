"""Participation repository - hourly turnout rows of one round."""

from app.models.common import Stored, check_round
from app.models.tally import PARTICIPATION_R1_SCHEMA, PARTICIPATION_R2_SCHEMA, ParticipationRecord
from app.repositories.access import AccessPolicy
from app.repositories.base import BaseRepository
from sheets_client import SheetsClient


class ParticipationRepository(BaseRepository[ParticipationRecord]):
    entity = "participation"

    def __init__(self, client: SheetsClient, policy: AccessPolicy, round_: int, audit=None):
        self.round = check_round(round_)
        schema = PARTICIPATION_R1_SCHEMA if round_ == 1 else PARTICIPATION_R2_SCHEMA
        super().__init__(client, policy, schema, audit)

    async def for_precinct(self, precinct_id: str) -> Stored[ParticipationRecord] | None:
        """Latest physical row of a precinct (highest offset wins)."""
        rows = await self.find(precinct_id)
        return rows[-1] if rows else None
