"""Precinct repository - polling locations and their voter rolls."""

from loguru import logger

from app.models.reference import PRECINCT_SCHEMA, Precinct
from app.repositories.access import AccessPolicy
from app.repositories.base import BaseRepository
from sheets_client import SheetsClient


class PrecinctRepository(BaseRepository[Precinct]):
    entity = "precinct"

    def __init__(self, client: SheetsClient, policy: AccessPolicy, audit=None):
        super().__init__(client, policy, PRECINCT_SCHEMA, audit)

    async def active(self) -> list[Precinct]:
        precincts = [p for p in await self.items() if p.active]
        logger.debug("active precincts: {}", len(precincts))
        return precincts

    async def registered_by_id(self) -> dict[str, int]:
        """Voter roll size per precinct id (active precincts only)."""
        return {p.id: p.registered for p in await self.active()}
