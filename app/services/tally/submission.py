"""Precinct data entry - participation samples, result sheets and their validation."""

from datetime import datetime, timezone

from loguru import logger

from app.errors import DomainError, PermissionDenied, RoundLocked
from app.models.audit import AuditAction
from app.models.common import check_round
from app.models.tally import ParticipationRecord, ReconciliationFlag, ResultRecord
from app.repositories.access import AccessPolicy, Role
from app.repositories.election import ElectionStateRepository
from app.repositories.reference import PrecinctRepository
from app.repositories.tally import ParticipationRepository, ResultRepository
from helpers import tally


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class SubmissionService:
    """Upserts precinct rows for the open round."""

    def __init__(
        self,
        policy: AccessPolicy,
        state_repo: ElectionStateRepository,
        precinct_repo: PrecinctRepository,
        participation_repos: dict[int, ParticipationRepository],
        result_repos: dict[int, ResultRepository],
    ):
        self._policy = policy
        self._state = state_repo
        self._precincts = precinct_repo
        self._participation = participation_repos
        self._results = result_repos

    @property
    def _signature(self) -> str:
        actor = self._policy.actor
        return actor.email or actor.context

    async def _check_open(self, round_: int) -> None:
        check_round(round_)
        state = await self._state.load()
        if state.is_locked(round_):
            raise RoundLocked(round_)
        if round_ == 2 and state.current_round < 2:
            raise PermissionDenied("Round 2 is not open")

    async def _registered(self, precinct_id: str, given: int | None) -> int:
        if given:
            return given
        return (await self._precincts.registered_by_id()).get(precinct_id, 0)

    async def submit_participation(
        self,
        round_: int,
        precinct_id: str,
        samples: list[int],
        registered: int | None = None,
    ) -> list[ReconciliationFlag]:
        """Store cumulative hourly samples; returns advisory flags."""
        await self._check_open(round_)
        repo = self._participation[round_]
        record = ParticipationRecord(
            precinct_id=precinct_id,
            round=round_,
            registered=await self._registered(precinct_id, registered),
            samples=samples,
            timestamp=_now(),
        )
        self._policy.check_write(repo.schema, [record])

        existing = await repo.for_precinct(precinct_id)
        if existing is None:
            await repo.append([record])
        else:
            await repo.update(existing, record)

        flags = tally.participation_flags(record, record.registered)
        logger.info("Participation R{} {}: latest {} ({} flag(s))", round_, precinct_id, record.latest(), len(flags))
        return flags

    async def submit_results(
        self,
        round_: int,
        precinct_id: str,
        *,
        turnout: int,
        blank: int,
        null: int,
        votes: dict[str, int],
        expressed: int | None = None,
        registered: int | None = None,
    ) -> list[ReconciliationFlag]:
        """Store a precinct result sheet. Resubmission clears any prior validation."""
        await self._check_open(round_)
        repo = self._results[round_]
        if expressed is None:
            expressed = turnout - blank - null
            if expressed < 0:
                raise DomainError(f"blank + null ({blank + null}) exceeds turnout ({turnout})")
        record = ResultRecord(
            precinct_id=precinct_id,
            round=round_,
            registered=await self._registered(precinct_id, registered),
            turnout=turnout,
            blank=blank,
            null=null,
            expressed=expressed,
            votes=votes,
            submitter=self._signature,
            timestamp=_now(),
        )
        self._policy.check_write(repo.schema, [record])

        existing = await repo.for_precinct(precinct_id)
        if existing:
            await repo.update(max(existing, key=lambda s: (s.item.expressed, s.ref.offset)), record)
        else:
            await repo.append([record])

        flags = tally.reconcile(record, record.registered)
        for flag in flags:
            logger.warning("Result R{} {}: {} (expected {}, got {})", round_, precinct_id, flag.kind, flag.expected, flag.actual)
        return flags

    async def validate_results(self, round_: int, precinct_id: str) -> ResultRecord:
        """Countersign the resolved result sheet of a precinct."""
        self._policy.require_role(Role.SUPERVISOR, Role.ADMINISTRATOR, action="Validating results")
        await self._check_open(round_)
        repo = self._results[round_]

        rows = await repo.for_precinct(precinct_id)
        if not rows:
            raise DomainError(f"No round {round_} results for precinct {precinct_id}")
        chosen = max(rows, key=lambda s: (s.item.expressed, s.ref.offset))

        validated = chosen.item.model_copy(update={"validator": self._signature, "timestamp": _now()})
        await repo.update(chosen, validated, action=AuditAction.VALIDATE)
        logger.info("Result R{} {} validated by {}", round_, precinct_id, self._signature)
        return validated
