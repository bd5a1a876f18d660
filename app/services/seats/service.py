"""Seat allocation service."""

from loguru import logger

from app.models.common import check_round
from app.models.seats import SeatDistribution
from app.repositories.access import AccessPolicy
from app.repositories.seats import SeatRepository
from app.services.tally.consolidation import ResultsConsolidator
from helpers.apportionment import allocate_community_seats, allocate_municipal_seats
from settings import SEATS_COMMUNITY_TOTAL, SEATS_MUNICIPAL_TOTAL, SEATS_THRESHOLD_PCT


class SeatService:
    """Computes both councils from a round's consolidated totals and stores them."""

    def __init__(
        self,
        policy: AccessPolicy,
        consolidator: ResultsConsolidator,
        municipal_repo: SeatRepository,
        community_repo: SeatRepository,
        municipal_total: int = SEATS_MUNICIPAL_TOTAL,
        community_total: int = SEATS_COMMUNITY_TOTAL,
        threshold_pct: float = SEATS_THRESHOLD_PCT,
    ):
        self._policy = policy
        self._consolidator = consolidator
        self._municipal = municipal_repo
        self._community = community_repo
        self.municipal_total = municipal_total
        self.community_total = community_total
        self.threshold_pct = threshold_pct

    async def compute(self, round_: int) -> SeatDistribution:
        consolidation = await self._consolidator.consolidate(check_round(round_))
        expressed = consolidation.totals.expressed
        municipal = allocate_municipal_seats(consolidation.ranking, self.municipal_total, self.threshold_pct, expressed)
        community = allocate_community_seats(consolidation.ranking, self.community_total, self.threshold_pct, expressed)
        logger.info(
            "Seats R{}: {} municipal, {} community across {} lists",
            round_,
            self.municipal_total,
            self.community_total,
            sum(1 for a in municipal if a.total_seats),
        )
        return SeatDistribution(round=round_, expressed=expressed, municipal=municipal, community=community)

    async def persist(self, round_: int) -> SeatDistribution:
        """Compute, then replace both seat tables (administrators only)."""
        self._policy.require_administrator("store seat allocations")
        distribution = await self.compute(round_)
        await self._municipal.store(distribution.municipal)
        await self._community.store(distribution.community)
        return distribution
