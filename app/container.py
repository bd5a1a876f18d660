"""Dependency Injection container - one per signed-in session."""

from loguru import logger

from app.models.common import ROUNDS
from app.repositories.access import AccessPolicy, Actor
from app.repositories.audit import AuditEmitter, AuditRepository
from app.repositories.election import ElectionStateRepository
from app.repositories.reference import CandidateListRepository, PrecinctRepository
from app.repositories.seats import SeatRepository
from app.repositories.tally import ParticipationRepository, ResultRepository
from app.services.election import ElectionStateMachine
from app.services.seats import SeatService
from app.services.tally import ResultsConsolidator, SubmissionService
from sheets_client import SheetsClient, TokenProvider


class Container:
    """Session container - owns the client (cache, in-flight reads) and everything built on it.

    Use as `async with Container(actor, tokens) as c:`; closing drains pending
    audit writes, then signs the actor out with the cache discarded. Never share one
    between actors.
    """

    def __init__(self, actor: Actor, token_provider: TokenProvider, **client_options):
        self.actor = actor
        self.policy = AccessPolicy(actor)
        self.tokens = token_provider
        self.client = SheetsClient(token_provider, **client_options)
        self.audit = AuditEmitter(self.client, actor.email or actor.context)

        # Repositories
        self.precincts = PrecinctRepository(self.client, self.policy, self.audit)
        self.lists = CandidateListRepository(self.client, self.policy, self.audit)
        self.participation = {r: ParticipationRepository(self.client, self.policy, r, self.audit) for r in ROUNDS}
        self.results = {r: ResultRepository(self.client, self.policy, r, self.audit) for r in ROUNDS}
        self.election_state = ElectionStateRepository(self.client, self.policy, self.audit)
        self.seats_municipal = SeatRepository(self.client, self.policy, community=False, audit=self.audit)
        self.seats_community = SeatRepository(self.client, self.policy, community=True, audit=self.audit)
        self.audit_log = AuditRepository(self.client, self.policy)

        # Services (with injected repos)
        self.consolidator = ResultsConsolidator(
            precinct_repo=self.precincts,
            list_repo=self.lists,
            result_repos=self.results,
            participation_repos=self.participation,
        )

        self.submissions = SubmissionService(
            policy=self.policy,
            state_repo=self.election_state,
            precinct_repo=self.precincts,
            participation_repos=self.participation,
            result_repos=self.results,
        )

        self.seats = SeatService(
            policy=self.policy,
            consolidator=self.consolidator,
            municipal_repo=self.seats_municipal,
            community_repo=self.seats_community,
        )

        self.state_machine = ElectionStateMachine(
            policy=self.policy,
            state_repo=self.election_state,
            list_repo=self.lists,
            consolidator=self.consolidator,
            audit=self.audit,
        )

    async def __aenter__(self):
        await self.client.__aenter__()
        logger.info("Session opened for {}", self.actor.context)
        return self

    async def __aexit__(self, *exc):
        try:
            await self.audit.drain()
        finally:
            await self.client.__aexit__(*exc)
            self.tokens.sign_out()
            logger.info("Session closed for {}", self.actor.context)
