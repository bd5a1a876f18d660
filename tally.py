#!/usr/bin/env python3
"""
Election tabulation from the command line.

Usage:
    python tally.py consolidate 1          # Communal results of round 1
    python tally.py participation 2        # Hourly turnout of round 2
    python tally.py seats 2                # Seat allocation from round-2 totals
    python tally.py seats 2 --persist      # ... and store it (administrator)
    python tally.py qualify                # Round-1 outcome, store the qualified pair
    python tally.py state                  # Current phase and election state
    python tally.py transition LOCK_ROUND1 # Apply a phase transition (administrator)
    python tally.py gate on|off            # Round-2 confirmation gate (administrator)

Environment:
    ELECTION_SPREADSHEET_ID, ELECTION_ACCESS_TOKEN,
    ELECTION_ROLE (PRECINCT_OPERATOR | SUPERVISOR | ADMINISTRATOR),
    ELECTION_PRECINCT, ELECTION_ACTOR
"""

import asyncio
import sys

from app.container import Container
from app.errors import DomainError, ManualDecisionRequired
from app.models.election import TransitionEvent
from app.repositories.access import Actor
from settings.logging import setup_logging
from sheets_client import StaticTokenProvider, StoreError

logger = setup_logging(level="INFO", to_file=True)


def _round(args: list[str]) -> int:
    if not args or not args[0].isdigit():
        print(__doc__)
        sys.exit(1)
    return int(args[0])


async def show_consolidation(c: Container, round_: int):
    result = await c.consolidator.consolidate(round_)
    t = result.totals

    print("\n" + "=" * 60)
    print(f"ROUND {round_} RESULTS ({result.precincts_reported}/{result.precincts_total} precincts)")
    print("=" * 60)
    print(f"  Registered: {t.registered:,}")
    print(f"  Turnout:    {t.turnout:,} ({t.participation_pct:.2f}%)")
    print(f"  Blank:      {t.blank:,} ({t.blank_pct:.2f}%)")
    print(f"  Null:       {t.null:,} ({t.null_pct:.2f}%)")
    print(f"  Expressed:  {t.expressed:,}")
    print()
    for i, lt in enumerate(result.ranking, 1):
        print(f"  {i:>2}. {lt.name:<30} {lt.votes:>8,}  {lt.pct_expressed:6.2f}%")
    if result.lead_gap is not None:
        print(f"\n  Lead: {result.lead_gap:,} votes")
    if result.duplicates_dropped:
        print(f"  Duplicate rows ignored: {result.duplicates_dropped}")
    for flag in result.flags:
        print(f"  ⚠️  {flag.precinct_id}: {flag.kind} (expected {flag.expected}, got {flag.actual})")
    print("=" * 60 + "\n")


async def show_participation(c: Container, round_: int):
    summary = await c.consolidator.participation(round_)

    print("\n" + "=" * 60)
    print(f"ROUND {round_} PARTICIPATION ({summary.precincts_reported} precincts reporting)")
    print("=" * 60)
    for h in summary.timeline:
        print(f"  {h.hour}  {h.turnout:>8,}  {h.pct:6.2f}%")
    for flag in summary.flags:
        print(f"  ⚠️  {flag.precinct_id}: {flag.kind} at {flag.detail}")
    print("=" * 60 + "\n")


async def show_seats(c: Container, round_: int, persist: bool):
    distribution = await (c.seats.persist(round_) if persist else c.seats.compute(round_))

    for title, rows in (("MUNICIPAL COUNCIL", distribution.municipal), ("COMMUNITY COUNCIL", distribution.community)):
        print("\n" + "=" * 60)
        print(f"{title} (round {round_})")
        print("=" * 60)
        for a in rows:
            print(f"  {a.name:<30} {a.percentage:6.2f}%  {a.total_seats:>3} seats  {a.method}")
    if persist:
        print("\n✅ Seat tables updated")
    print()


async def run_qualification(c: Container):
    try:
        outcome = await c.state_machine.qualify_from_results()
    except ManualDecisionRequired as e:
        print(f"\n❌ {e.message}\n   Decide manually, then store the pair with an override.\n")
        return

    if not outcome.runoff_required:
        print(f"\n✅ Elected in round 1: {outcome.winner.name} ({outcome.leader_pct:.2f}%)\n")
        return
    print("\nQualified for round 2:")
    for q in outcome.qualified:
        print(f"  - {q.name} ({q.pct_expressed:.2f}%)")
    for alert in outcome.alerts:
        print(f"  ⚠️  {alert}")
    print()


async def show_state(c: Container):
    state = await c.state_machine.state()
    print(f"\nPhase: {state.phase}")
    for key, value in state.to_cells().items():
        print(f"  {key}: {value}")
    for key, value in state.extras.items():
        print(f"  {key}: {value} (unmanaged)")
    print()


async def run_transition(c: Container, event: str):
    result = await c.state_machine.transition(TransitionEvent(event.upper()))
    print(f"\n✅ {result.event}: {result.from_phase} -> {result.to_phase}")
    if not result.consistent:
        print(f"❌ List flags not updated: {result.propagation_error}")
    print()


async def run(actor: Actor, args: list[str]):
    command, rest = args[0], args[1:]
    async with Container(actor, StaticTokenProvider.from_env()) as c:
        if command == "consolidate":
            await show_consolidation(c, _round(rest))
        elif command == "participation":
            await show_participation(c, _round(rest))
        elif command == "seats":
            await show_seats(c, _round(rest), "--persist" in rest)
        elif command == "qualify":
            await run_qualification(c)
        elif command == "state":
            await show_state(c)
        elif command == "transition" and rest:
            await run_transition(c, rest[0])
        elif command == "gate" and rest and rest[0] in ("on", "off"):
            await c.state_machine.set_gate(rest[0] == "on")
            print(f"\n✅ Round-2 gate {rest[0]}\n")
        else:
            print(__doc__)
            sys.exit(1)


def main():
    args = sys.argv[1:]
    if not args or args[0] in ("-h", "--help"):
        print(__doc__)
        return

    try:
        actor = Actor.from_env()
        logger.configure(extra={"actor": actor.email or actor.context})
        asyncio.run(run(actor, args))
    except (DomainError, StoreError, ValueError) as e:
        logger.error("{}: {}", type(e).__name__, e)
        sys.exit(2)


if __name__ == "__main__":
    main()
