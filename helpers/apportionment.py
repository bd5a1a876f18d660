"""Seat apportionment: majority premium plus highest averages.

All quotient comparisons use exact fractions so results never depend on
float rounding.
"""

from collections.abc import Sequence
from fractions import Fraction

from app.errors import AllocationError
from app.models.seats import SeatAllocation
from app.models.tally import ListTotal


def _ranked(lists: Sequence[ListTotal]) -> list[ListTotal]:
    return sorted(lists, key=lambda t: (-t.votes, t.order, t.list_id))


def _base(lists: Sequence[ListTotal], total_seats: int, expressed: int | None) -> int:
    if total_seats <= 0:
        raise AllocationError(f"Total seats must be positive, got {total_seats}")
    votes = sum(t.votes for t in lists)
    if votes <= 0:
        raise AllocationError("No votes to allocate seats from")
    return expressed or votes


def eligible_lists(lists: Sequence[ListTotal], threshold_pct: float, expressed: int) -> list[ListTotal]:
    """Lists whose share of expressed votes is at least `threshold_pct`."""
    threshold = Fraction(str(threshold_pct))
    return [t for t in lists if t.votes > 0 and Fraction(t.votes * 100, expressed) >= threshold]


def highest_averages(lists: Sequence[ListTotal], seats: int) -> dict[str, int]:
    """Award seats one at a time to the greatest votes / (won + 1).

    Ties go to the higher vote total, then to the earlier list order.
    """
    won = {t.list_id: 0 for t in lists}
    if not lists:
        return won
    position = {t.list_id: i for i, t in enumerate(_ranked(lists))}
    for _ in range(seats):
        best = max(
            lists,
            key=lambda t: (Fraction(t.votes, won[t.list_id] + 1), t.votes, -t.order, -position[t.list_id]),
        )
        won[best.list_id] += 1
    return won


def _build(
    lists: Sequence[ListTotal],
    expressed: int,
    eligible: set[str],
    premium: dict[str, int],
    proportional: dict[str, int],
    total_seats: int,
) -> list[SeatAllocation]:
    rows = []
    for t in _ranked(lists):
        majority = premium.get(t.list_id, 0)
        prop = proportional.get(t.list_id, 0)
        rows.append(
            SeatAllocation(
                list_id=t.list_id,
                name=t.name,
                votes=t.votes,
                percentage=round(t.votes / expressed * 100, 2),
                majority_seats=majority,
                proportional_seats=prop,
                total_seats=majority + prop,
                eligible=t.list_id in eligible,
            )
        )
    allocated = sum(r.total_seats for r in rows)
    if allocated != total_seats:
        raise AllocationError(f"Allocated {allocated} seats instead of {total_seats}")
    return rows


def allocate_municipal_seats(
    ranked: Sequence[ListTotal],
    total_seats: int,
    threshold_pct: float,
    expressed: int | None = None,
) -> list[SeatAllocation]:
    """Municipal council: ceil(total/2) premium to the top list, the rest by highest averages.

    The premium winner takes part in the proportional stage when it clears
    the threshold; the threshold is not re-checked for the premium itself.
    """
    base = _base(ranked, total_seats, expressed)
    eligible = eligible_lists(ranked, threshold_pct, base)
    if not eligible:
        raise AllocationError(f"No list reaches the {threshold_pct}% threshold")

    top = _ranked(ranked)[0]
    premium_seats = (total_seats + 1) // 2
    proportional = highest_averages(eligible, total_seats - premium_seats)
    return _build(ranked, base, {t.list_id for t in eligible}, {top.list_id: premium_seats}, proportional, total_seats)


def allocate_community_seats(
    ranked: Sequence[ListTotal],
    total_seats: int,
    threshold_pct: float,
    expressed: int | None = None,
) -> list[SeatAllocation]:
    """Community council: highest averages only, same threshold and vote totals."""
    base = _base(ranked, total_seats, expressed)
    eligible = eligible_lists(ranked, threshold_pct, base)
    if not eligible:
        raise AllocationError(f"No list reaches the {threshold_pct}% threshold")

    proportional = highest_averages(eligible, total_seats)
    return _build(ranked, base, {t.list_id for t in eligible}, {}, proportional, total_seats)
