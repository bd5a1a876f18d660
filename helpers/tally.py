"""Result consolidation and participation math."""

from collections.abc import Iterable, Sequence

import polars as pl

from app.models.common import Stored
from app.models.reference import CandidateList
from app.models.tally import (
    CommunalTotals,
    FlagKind,
    HourlyTurnout,
    ListTotal,
    ParticipationRecord,
    ReconciliationFlag,
    ResultRecord,
)
from settings import PARTICIPATION_HOURS

_UNLISTED_ORDER = 10**6


def dedup_results(rows: Iterable[Stored[ResultRecord]]) -> tuple[list[ResultRecord], int]:
    """One record per precinct: highest `expressed`, then highest row offset.

    Returns (resolved records, number of rows dropped).
    """
    best: dict[str, Stored[ResultRecord]] = {}
    count = 0
    for row in rows:
        count += 1
        current = best.get(row.item.precinct_id)
        if current is None or (row.item.expressed, row.ref.offset) > (current.item.expressed, current.ref.offset):
            best[row.item.precinct_id] = row
    return [s.item for s in best.values()], count - len(best)


def dedup_latest(rows: Iterable[Stored[ParticipationRecord]]) -> list[ParticipationRecord]:
    """One participation record per precinct: the highest row offset wins."""
    latest: dict[str, Stored[ParticipationRecord]] = {}
    for row in rows:
        current = latest.get(row.item.precinct_id)
        if current is None or row.ref.offset > current.ref.offset:
            latest[row.item.precinct_id] = row
    return [s.item for s in latest.values()]


def effective_registered(record: ResultRecord | ParticipationRecord, reference: dict[str, int]) -> int:
    """Registered voters of a record, falling back to the precinct roll when the row says 0."""
    return record.registered or reference.get(record.precinct_id, 0)


def reconcile(record: ResultRecord, registered: int) -> list[ReconciliationFlag]:
    flags = []
    counted = record.blank + record.null + record.expressed
    if record.turnout != counted:
        flags.append(
            ReconciliationFlag(record.precinct_id, FlagKind.TURNOUT_MISMATCH, counted, record.turnout, "blank + null + expressed")
        )
    if record.votes_total != record.expressed:
        flags.append(
            ReconciliationFlag(record.precinct_id, FlagKind.VOTES_MISMATCH, record.expressed, record.votes_total, "sum of list votes")
        )
    if registered and record.turnout > registered:
        flags.append(
            ReconciliationFlag(record.precinct_id, FlagKind.TURNOUT_EXCEEDS_REGISTERED, registered, record.turnout)
        )
    return flags


def communal_totals(records: Sequence[ResultRecord], reference: dict[str, int]) -> CommunalTotals:
    totals = CommunalTotals()
    for r in records:
        totals.registered += effective_registered(r, reference)
        totals.turnout += r.turnout
        totals.blank += r.blank
        totals.null += r.null
        totals.expressed += r.expressed
    return totals


def rank_lists(
    records: Sequence[ResultRecord],
    lists: Sequence[CandidateList],
    round_: int,
    totals: CommunalTotals,
) -> list[ListTotal]:
    """Per-list communal totals, descending by votes (ties by list order).

    Lists active in the round are always ranked; any other list id that
    received votes is ranked too so no vote is lost.
    """
    votes: dict[str, int] = {}
    for r in records:
        for list_id, n in r.votes.items():
            votes[list_id] = votes.get(list_id, 0) + n

    known = {c.list_id: c for c in lists}
    ids = [c.list_id for c in lists if c.active_in(round_)]
    ids += [lid for lid, n in votes.items() if n > 0 and lid not in ids]

    ranked = []
    for lid in ids:
        n = votes.get(lid, 0)
        meta = known.get(lid)
        ranked.append(
            ListTotal(
                list_id=lid,
                name=meta.display_name if meta else lid,
                votes=n,
                pct_expressed=n / totals.expressed * 100 if totals.expressed else 0.0,
                pct_registered=n / totals.registered * 100 if totals.registered else 0.0,
                order=meta.order if meta else _UNLISTED_ORDER,
                color=meta.color if meta else "",
            )
        )
    ranked.sort(key=lambda t: (-t.votes, t.order, t.list_id))
    return ranked


def participation_flags(record: ParticipationRecord, registered: int) -> list[ReconciliationFlag]:
    """Decreasing cumulative samples and samples above the voter roll. Zero means not reported."""
    flags = []
    previous = 0
    for hour, value in zip(PARTICIPATION_HOURS, record.samples):
        if not value:
            continue
        if value < previous:
            flags.append(ReconciliationFlag(record.precinct_id, FlagKind.DECREASING_SAMPLE, previous, value, hour))
        if registered and value > registered:
            flags.append(ReconciliationFlag(record.precinct_id, FlagKind.SAMPLE_EXCEEDS_REGISTERED, registered, value, hour))
        previous = value
    return flags


def hourly_turnout(records: Sequence[ParticipationRecord], registered: int) -> list[HourlyTurnout]:
    """Communal cumulative turnout per hour.

    Per precinct, the value at hour h is its last non-zero sample at or
    before h; the communal value is the sum across precincts.
    """
    frame = pl.DataFrame(
        {
            "precinct_id": [r.precinct_id for r in records for _ in PARTICIPATION_HOURS],
            "hour_idx": [i for _ in records for i in range(len(PARTICIPATION_HOURS))],
            "voters": [v for r in records for v in r.samples],
        },
        schema={"precinct_id": pl.Utf8, "hour_idx": pl.Int64, "voters": pl.Int64},
    )
    summed = (
        frame.with_columns(pl.when(pl.col("voters") > 0).then(pl.col("voters")).alias("voters"))
        .sort(["precinct_id", "hour_idx"])
        .with_columns(pl.col("voters").forward_fill().over("precinct_id").fill_null(0))
        .group_by("hour_idx")
        .agg(pl.col("voters").sum())
    )
    by_hour = dict(zip(summed["hour_idx"].to_list(), summed["voters"].to_list()))

    timeline = []
    for i, hour in enumerate(PARTICIPATION_HOURS):
        turnout = int(by_hour.get(i) or 0)
        timeline.append(
            HourlyTurnout(
                hour=hour,
                turnout=turnout,
                registered=registered,
                pct=turnout / registered * 100 if registered else 0.0,
            )
        )
    return timeline
