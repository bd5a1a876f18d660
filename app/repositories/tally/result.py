"""Result repository - precinct result sheets of one round."""

from app.models.common import Stored, check_round
from app.models.tally import RESULTS_R1_SCHEMA, RESULTS_R2_SCHEMA, ResultRecord
from app.repositories.access import AccessPolicy
from app.repositories.base import BaseRepository
from sheets_client import SheetsClient


class ResultRepository(BaseRepository[ResultRecord]):
    entity = "result"

    def __init__(self, client: SheetsClient, policy: AccessPolicy, round_: int, audit=None):
        self.round = check_round(round_)
        schema = RESULTS_R1_SCHEMA if round_ == 1 else RESULTS_R2_SCHEMA
        super().__init__(client, policy, schema, audit)

    async def for_precinct(self, precinct_id: str) -> list[Stored[ResultRecord]]:
        """All physical rows of a precinct, in row order."""
        return await self.find(precinct_id)
