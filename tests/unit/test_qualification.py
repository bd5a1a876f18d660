"""Tests for round-2 qualification."""

import pytest

from app.errors import ManualDecisionRequired
from app.models.tally import ListTotal
from helpers.qualification import qualify_for_round2


def lists(*votes: int) -> list[ListTotal]:
    return [ListTotal(list_id=f"L{i}", name=f"List {i}", votes=v, order=i) for i, v in enumerate(votes)]


class TestQualification:
    def test_absolute_majority_wins_outright(self):
        outcome = qualify_for_round2(lists(510, 300, 190))
        assert not outcome.runoff_required
        assert outcome.winner.list_id == "L0"
        assert outcome.qualified == []

    def test_exactly_half_is_not_a_majority(self):
        outcome = qualify_for_round2(lists(500, 300, 200))
        assert outcome.runoff_required
        assert outcome.qualified_ids == ["L0", "L1"]

    def test_top_two_qualify(self):
        outcome = qualify_for_round2(lists(450, 350, 200))
        assert outcome.qualified_ids == ["L0", "L1"]
        assert [t.list_id for t in outcome.admitted] == ["L0", "L1", "L2"]

    def test_third_admitted_raises_alert_only(self):
        outcome = qualify_for_round2(lists(400, 350, 250))
        assert len(outcome.qualified) == 2
        assert len(outcome.alerts) == 1
        assert "also admitted" in outcome.alerts[0]

    def test_fewer_than_two_admitted(self):
        outcome = qualify_for_round2(lists(480, 470, 50), expressed=1000, admission_pct=50.0)
        assert outcome.qualified_ids == ["L0", "L1"]
        assert any("Only 0" in a for a in outcome.alerts)

    def test_tie_for_second_requires_decision(self):
        with pytest.raises(ManualDecisionRequired) as exc:
            qualify_for_round2(lists(600, 300, 300))
        assert sorted(exc.value.tied) == ["L1", "L2"]

    def test_tie_for_first_pair_is_fine(self):
        outcome = qualify_for_round2(lists(400, 400, 200))
        assert outcome.qualified_ids == ["L0", "L1"]

    def test_unsorted_input(self):
        outcome = qualify_for_round2(list(reversed(lists(450, 350, 200))))
        assert outcome.qualified_ids == ["L0", "L1"]

    def test_no_votes(self):
        outcome = qualify_for_round2(lists(0, 0))
        assert outcome.runoff_required
        assert outcome.qualified == []
        assert outcome.alerts
