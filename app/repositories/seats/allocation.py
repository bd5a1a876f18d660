"""Seat allocation repository - computed seat tables, fully rewritten on each run."""

from app.models.audit import AuditAction
from app.models.seats import SEATS_COMMUNITY_SCHEMA, SEATS_MUNICIPAL_SCHEMA, SeatAllocation
from app.repositories.access import AccessPolicy
from app.repositories.base import BaseRepository
from sheets_client import SheetsClient


class SeatRepository(BaseRepository[SeatAllocation]):
    entity = "seats"

    def __init__(self, client: SheetsClient, policy: AccessPolicy, community: bool = False, audit=None):
        self.community = community
        schema = SEATS_COMMUNITY_SCHEMA if community else SEATS_MUNICIPAL_SCHEMA
        super().__init__(client, policy, schema, audit)

    async def store(self, allocations: list[SeatAllocation]) -> None:
        await self.replace_all(allocations, action=AuditAction.CALCULATE)
