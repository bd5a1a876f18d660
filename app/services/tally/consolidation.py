"""Results consolidation service."""

import asyncio

from loguru import logger

from app.models.common import check_round
from app.models.tally import Consolidation, ParticipationSummary
from app.repositories.reference import CandidateListRepository, PrecinctRepository
from app.repositories.tally import ParticipationRepository, ResultRepository
from helpers import tally


class ResultsConsolidator:
    """Turns the visible precinct rows of a round into communal figures.

    Reconciliation problems are returned as flags; tabulation itself is
    all-or-nothing (any store or decode error propagates).
    """

    def __init__(
        self,
        precinct_repo: PrecinctRepository,
        list_repo: CandidateListRepository,
        result_repos: dict[int, ResultRepository],
        participation_repos: dict[int, ParticipationRepository],
    ):
        self._precincts = precinct_repo
        self._lists = list_repo
        self._results = result_repos
        self._participation = participation_repos
        logger.debug("ResultsConsolidator initialized")

    async def consolidate(self, round_: int) -> Consolidation:
        check_round(round_)
        rows, lists, reference = await asyncio.gather(
            self._results[round_].all(),
            self._lists.ordered(),
            self._precincts.registered_by_id(),
        )

        resolved, dropped = tally.dedup_results(rows)
        if dropped:
            logger.info("Round {}: {} duplicate result row(s) dropped", round_, dropped)

        flags = []
        for record in resolved:
            flags.extend(tally.reconcile(record, tally.effective_registered(record, reference)))
        for flag in flags:
            logger.warning("Round {} precinct {}: {} (expected {}, got {})", round_, flag.precinct_id, flag.kind, flag.expected, flag.actual)

        totals = tally.communal_totals(resolved, reference)
        ranking = tally.rank_lists(resolved, lists, round_, totals)

        logger.info(
            "Round {} consolidated: {}/{} precincts, {} expressed, {} lists",
            round_,
            len(resolved),
            len(reference),
            totals.expressed,
            len(ranking),
        )
        return Consolidation(
            round=round_,
            totals=totals,
            ranking=ranking,
            resolved=resolved,
            flags=flags,
            duplicates_dropped=dropped,
            precincts_reported=len(resolved),
            precincts_total=len(reference),
        )

    async def participation(self, round_: int) -> ParticipationSummary:
        """Hourly communal turnout over the precincts that reported."""
        check_round(round_)
        rows, reference = await asyncio.gather(
            self._participation[round_].all(),
            self._precincts.registered_by_id(),
        )
        records = tally.dedup_latest(rows)

        registered = 0
        flags = []
        for record in records:
            reg = tally.effective_registered(record, reference)
            registered += reg
            flags.extend(tally.participation_flags(record, reg))
        for flag in flags:
            logger.warning("Participation R{} precinct {}: {} at {}", round_, flag.precinct_id, flag.kind, flag.detail)

        timeline = tally.hourly_turnout(records, registered)
        return ParticipationSummary(
            round=round_,
            registered=registered,
            turnout=timeline[-1].turnout,
            pct=timeline[-1].pct,
            timeline=timeline,
            flags=flags,
            precincts_reported=len(records),
        )
