"""Election phase transitions and round-2 qualification."""

from loguru import logger

from app.errors import DomainError, TransitionRejected
from app.models.audit import AuditAction
from app.models.election import ElectionState, Phase, QualificationOutcome, TransitionEvent, TransitionResult
from app.repositories.access import AccessPolicy
from app.repositories.audit import AuditEmitter
from app.repositories.election import ElectionStateRepository
from app.repositories.reference import CandidateListRepository
from app.services.tally.consolidation import ResultsConsolidator
from helpers.qualification import qualify_for_round2
from sheets_client import StoreError

TRANSITIONS: dict[tuple[Phase, TransitionEvent], Phase] = {
    (Phase.ROUND1_OPEN, TransitionEvent.LOCK_ROUND1): Phase.ROUND1_LOCKED,
    (Phase.ROUND1_LOCKED, TransitionEvent.UNLOCK_ROUND1): Phase.ROUND1_OPEN,
    (Phase.ROUND1_LOCKED, TransitionEvent.OPEN_ROUND2): Phase.ROUND2_OPEN,
    (Phase.ROUND2_OPEN, TransitionEvent.LOCK_ROUND2): Phase.ROUND2_LOCKED,
    (Phase.ROUND2_LOCKED, TransitionEvent.UNLOCK_ROUND2): Phase.ROUND2_OPEN,
    (Phase.ROUND1_LOCKED, TransitionEvent.RESET_TO_ROUND1): Phase.ROUND1_OPEN,
    (Phase.ROUND2_LOCKED, TransitionEvent.RESET_TO_ROUND1): Phase.ROUND1_OPEN,
}

_AUDIT_ACTION = {
    TransitionEvent.LOCK_ROUND1: AuditAction.LOCK,
    TransitionEvent.LOCK_ROUND2: AuditAction.LOCK,
    TransitionEvent.UNLOCK_ROUND1: AuditAction.UNLOCK,
    TransitionEvent.UNLOCK_ROUND2: AuditAction.UNLOCK,
    TransitionEvent.OPEN_ROUND2: AuditAction.TRANSITION,
    TransitionEvent.RESET_TO_ROUND1: AuditAction.RESET,
}


_UPDATES: dict[TransitionEvent, dict] = {
    TransitionEvent.LOCK_ROUND1: {"round1_locked": True},
    TransitionEvent.UNLOCK_ROUND1: {"round1_locked": False},
    TransitionEvent.OPEN_ROUND2: {"current_round": 2, "round2_locked": False},
    TransitionEvent.LOCK_ROUND2: {"round2_locked": True},
    TransitionEvent.UNLOCK_ROUND2: {"round2_locked": False},
    TransitionEvent.RESET_TO_ROUND1: {
        "current_round": 1,
        "round1_locked": False,
        "round2_locked": False,
        "round2_gate": False,
        "qualified_lists": [],
        "qualification_override": False,
    },
}


def apply_event(state: ElectionState, event: TransitionEvent) -> ElectionState:
    """State after `event`; assumes the transition is allowed."""
    return state.model_copy(update=_UPDATES[event])


class ElectionStateMachine:
    """Drives ROUND1_OPEN -> ROUND1_LOCKED -> ROUND2_OPEN -> ROUND2_LOCKED.

    The phase is always derived from the persisted state. Every mutating
    call requires the administrator role and is audited.
    """

    def __init__(
        self,
        policy: AccessPolicy,
        state_repo: ElectionStateRepository,
        list_repo: CandidateListRepository,
        consolidator: ResultsConsolidator,
        audit: AuditEmitter | None = None,
    ):
        self._policy = policy
        self._state = state_repo
        self._lists = list_repo
        self._consolidator = consolidator
        self._audit = audit

    def _record(self, action: AuditAction, entity_id: str, before: dict, after: dict) -> None:
        if self._audit is not None:
            self._audit.record(action, "election", entity_id, before, after)

    async def state(self) -> ElectionState:
        return await self._state.load()

    async def phase(self) -> Phase:
        return (await self._state.load()).phase

    async def _save(self, before: ElectionState, after: ElectionState, always: tuple[str, ...] = ()) -> None:
        old, new = before.to_cells(), after.to_cells()
        keys = [k for k in new if old[k] != new[k] or k in always]
        await self._state.save(after, keys)

    def _check_open_round2(self, state: ElectionState) -> None:
        event = TransitionEvent.OPEN_ROUND2
        if not state.round2_gate:
            raise TransitionRejected(state.phase, event, "round-2 confirmation gate is disabled")
        count = len(state.qualified_lists)
        if count == 0:
            raise TransitionRejected(state.phase, event, "no qualified lists")
        if count != 2 and not state.qualification_override:
            raise TransitionRejected(state.phase, event, f"{count} qualified lists, exactly 2 required without override")

    async def transition(self, event: TransitionEvent | str) -> TransitionResult:
        event = TransitionEvent(event)
        self._policy.require_administrator(f"apply {event}")
        state = await self._state.load()
        phase = state.phase

        target = TRANSITIONS.get((phase, event))
        if target is None:
            raise TransitionRejected(phase, event, "not allowed from this phase")
        if event == TransitionEvent.OPEN_ROUND2:
            self._check_open_round2(state)

        new_state = apply_event(state, event)
        always = ("current_round", "qualified_lists") if event == TransitionEvent.OPEN_ROUND2 else ()
        await self._save(state, new_state, always)
        logger.info("Election transition {}: {} -> {}", event, phase, target)
        self._record(
            _AUDIT_ACTION[event],
            str(event),
            {"phase": str(phase), **state.to_cells()},
            {"phase": str(target), **new_state.to_cells()},
        )

        propagation_error = None
        if event == TransitionEvent.OPEN_ROUND2:
            try:
                written = await self._lists.set_round2(new_state.qualified_lists)
                logger.info("Round-2 flags written for {} list(s)", written)
            except (StoreError, DomainError) as e:
                propagation_error = str(e)
                logger.error("Round 2 opened but list flags were not updated: {}", e)

        return TransitionResult(
            event=event,
            from_phase=phase,
            to_phase=target,
            state=new_state,
            propagation_error=propagation_error,
        )

    async def set_gate(self, enabled: bool) -> ElectionState:
        """Enable or disable the round-2 confirmation gate."""
        self._policy.require_administrator("change the round-2 gate")
        state = await self._state.load()
        new_state = state.model_copy(update={"round2_gate": enabled})
        await self._save(state, new_state, ("round2_gate",))
        logger.info("Round-2 gate {}", "enabled" if enabled else "disabled")
        self._record(AuditAction.CONFIG, "round2_gate", {"round2_gate": state.round2_gate}, {"round2_gate": enabled})
        return new_state

    async def set_qualified(self, list_ids: list[str], override: bool = False) -> ElectionState:
        """Set the qualified pair. `override` allows a count other than two."""
        self._policy.require_administrator("set qualified lists")
        state = await self._state.load()
        if state.current_round == 2:
            raise DomainError("Qualified lists cannot change once round 2 is open")

        ids = list(dict.fromkeys(list_ids))
        known = {c.list_id for c in await self._lists.items()}
        unknown = [i for i in ids if i not in known]
        if unknown:
            raise DomainError(f"Unknown list id(s): {', '.join(unknown)}")
        if len(ids) != 2 and not override:
            raise DomainError(f"Exactly 2 qualified lists required without override, got {len(ids)}")

        new_state = state.model_copy(update={"qualified_lists": ids, "qualification_override": override})
        await self._save(state, new_state, ("qualified_lists", "qualification_override"))
        logger.info("Qualified lists set: {} (override={})", ids, override)
        self._record(
            AuditAction.QUALIFY,
            "qualified_lists",
            {"qualified_lists": state.qualified_lists, "override": state.qualification_override},
            {"qualified_lists": ids, "override": override},
        )
        return new_state

    async def qualify_from_results(self) -> QualificationOutcome:
        """Compute the round-1 outcome and store the qualified pair when there is one.

        Raises ManualDecisionRequired on a tie for the second position.
        """
        self._policy.require_administrator("qualify lists for round 2")
        consolidation = await self._consolidator.consolidate(1)
        outcome = qualify_for_round2(consolidation.ranking, consolidation.totals.expressed)
        for alert in outcome.alerts:
            logger.warning("Qualification: {}", alert)

        if not outcome.runoff_required:
            logger.info("Round 1 decided: {} with {:.2f}%", outcome.winner.name, outcome.leader_pct)
        elif len(outcome.qualified) == 2:
            await self.set_qualified(outcome.qualified_ids)
        return outcome
