"""Round-1 outcome: outright winner or the pair qualified for round 2."""

from collections.abc import Sequence
from fractions import Fraction

from app.errors import ManualDecisionRequired
from app.models.election import QualificationOutcome
from app.models.tally import ListTotal
from settings import ABSOLUTE_MAJORITY_PCT, RUNOFF_ADMISSION_PCT


def _share_at_least(votes: int, expressed: int, pct: float) -> bool:
    return Fraction(votes * 100, expressed) >= Fraction(str(pct))


def qualify_for_round2(
    ranked: Sequence[ListTotal],
    expressed: int | None = None,
    majority_pct: float = ABSOLUTE_MAJORITY_PCT,
    admission_pct: float = RUNOFF_ADMISSION_PCT,
) -> QualificationOutcome:
    """Exactly the top two lists qualify; admission beyond two only raises an alert.

    Raises ManualDecisionRequired when the second qualifying position is tied.
    """
    lists = sorted(ranked, key=lambda t: (-t.votes, t.order, t.list_id))
    base = expressed or sum(t.votes for t in lists)
    if not lists or base <= 0:
        return QualificationOutcome(runoff_required=True, leader_pct=0.0, alerts=["No expressed votes yet"])

    leader = lists[0]
    leader_pct = leader.votes / base * 100
    if Fraction(leader.votes * 100, base) > Fraction(str(majority_pct)):
        return QualificationOutcome(runoff_required=False, leader_pct=leader_pct, winner=leader)

    if len(lists) > 2 and lists[1].votes == lists[2].votes:
        tied = [t.list_id for t in lists if t.votes == lists[1].votes]
        raise ManualDecisionRequired(tied)

    admitted = [t for t in lists if t.votes > 0 and _share_at_least(t.votes, base, admission_pct)]
    qualified = lists[:2]
    alerts = []
    if len(admitted) > 2:
        names = ", ".join(t.name for t in admitted[2:])
        alerts.append(f"{len(admitted)} lists reach {admission_pct}%; also admitted: {names} (administrative override possible)")
    if len(admitted) < 2:
        alerts.append(f"Only {len(admitted)} list(s) reach {admission_pct}%; qualifying the top two by votes")
    if len(qualified) < 2:
        alerts.append("Fewer than two lists received votes")

    return QualificationOutcome(
        runoff_required=True,
        leader_pct=leader_pct,
        qualified=qualified,
        admitted=admitted,
        alerts=alerts,
    )
