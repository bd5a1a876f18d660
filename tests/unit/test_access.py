"""Tests for role-based row filtering through the repositories."""

import asyncio

import pytest

from app.errors import PermissionDenied
from app.models.audit import AUDIT_SCHEMA
from app.models.reference import CandidateList
from app.models.tally import RESULTS_R1_SCHEMA, ResultRecord
from app.repositories.access import AccessPolicy, Actor, Role
from sheets_client import AuthenticationRequired


class TestActor:
    def test_operator_needs_precinct(self):
        with pytest.raises(ValueError):
            Actor(Role.PRECINCT_OPERATOR)

    def test_context(self):
        assert Actor(Role.PRECINCT_OPERATOR, "BV1").context == "PRECINCT_OPERATOR:BV1"
        assert Actor(Role.SUPERVISOR).context == "SUPERVISOR"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ELECTION_ROLE", "precinct_operator")
        monkeypatch.setenv("ELECTION_PRECINCT", "BV2")
        monkeypatch.setenv("ELECTION_ACTOR", "op@mairie.test")
        actor = Actor.from_env()
        assert actor.role == Role.PRECINCT_OPERATOR
        assert actor.precinct_id == "BV2"


class TestPolicy:
    def test_operator_cannot_write_other_precinct(self):
        policy = AccessPolicy(Actor(Role.PRECINCT_OPERATOR, "BV1"))
        policy.check_write(RESULTS_R1_SCHEMA, [ResultRecord(precinct_id="BV1")])
        with pytest.raises(PermissionDenied):
            policy.check_write(RESULTS_R1_SCHEMA, [ResultRecord(precinct_id="BV1"), ResultRecord(precinct_id="BV2")])

    def test_operator_cannot_delete_scoped_rows(self):
        with pytest.raises(PermissionDenied):
            AccessPolicy(Actor(Role.PRECINCT_OPERATOR, "BV1")).check_delete(RESULTS_R1_SCHEMA)

    def test_supervisor_writes_any_precinct(self):
        AccessPolicy(Actor(Role.SUPERVISOR)).check_write(RESULTS_R1_SCHEMA, [ResultRecord(precinct_id="BV9")])

    def test_audit_log_append_only(self):
        policy = AccessPolicy(Actor(Role.ADMINISTRATOR))
        with pytest.raises(PermissionDenied):
            policy.check_write(AUDIT_SCHEMA, [])
        with pytest.raises(PermissionDenied):
            policy.check_delete(AUDIT_SCHEMA)

    def test_require_role(self):
        policy = AccessPolicy(Actor(Role.SUPERVISOR))
        policy.require_role(Role.SUPERVISOR, Role.ADMINISTRATOR)
        with pytest.raises(PermissionDenied):
            policy.require_administrator()


class TestFilteredReads:
    def test_operator_sees_own_precinct_only(self, election, make_session):
        async def scenario():
            async with make_session(Role.PRECINCT_OPERATOR, "BV2", "op2@mairie.test") as s:
                return await s.results[1].items()

        rows = asyncio.run(scenario())
        assert [r.precinct_id for r in rows] == ["BV2"]

    def test_reference_tables_not_filtered(self, election, make_session):
        async def scenario():
            async with make_session(Role.PRECINCT_OPERATOR, "BV2", "op2@mairie.test") as s:
                return await s.precincts.items(), await s.lists.items()

        precincts, lists = asyncio.run(scenario())
        assert len(precincts) == 3
        assert len(lists) == 3

    def test_supervisor_sees_everything(self, election, make_session):
        async def scenario():
            async with make_session(Role.SUPERVISOR, email="sup@mairie.test") as s:
                return await s.results[1].items()

        assert len(asyncio.run(scenario())) == 2

    def test_roles_do_not_share_cache_entries(self, election, make_session):
        async def scenario():
            async with make_session() as s:
                op = AccessPolicy(Actor(Role.PRECINCT_OPERATOR, "BV1"))
                await s.client.read("Results_R1", context=op.context)
                await s.client.read("Results_R1", context=s.policy.context)
                return s.client.request_count

        assert asyncio.run(scenario()) == 2


class TestFilteredWrites:
    def test_operator_write_to_other_precinct_rejected(self, election, make_session):
        async def scenario():
            async with make_session(Role.PRECINCT_OPERATOR, "BV1", "op1@mairie.test") as s:
                await s.results[1].append([ResultRecord(precinct_id="BV3", round=1)])

        with pytest.raises(PermissionDenied):
            asyncio.run(scenario())
        assert election.calls("POST") == []

    def test_operator_delete_rejected(self, election, make_session):
        async def scenario():
            async with make_session(Role.PRECINCT_OPERATOR, "BV1", "op1@mairie.test") as s:
                own = await s.results[1].all()
                await s.results[1].delete(own[0])

        with pytest.raises(PermissionDenied):
            asyncio.run(scenario())

    def test_admin_tables_need_administrator(self, election, make_session):
        async def scenario():
            async with make_session(Role.SUPERVISOR, email="sup@mairie.test") as s:
                await s.lists.append([CandidateList(list_id="L9", name="Late")])

        with pytest.raises(PermissionDenied):
            asyncio.run(scenario())
        assert len(election.raw("Lists")) == 3

    def test_admin_delete_clears_row(self, election, make_session):
        async def scenario():
            async with make_session() as s:
                rows = await s.results[1].all()
                await s.results[1].delete(rows[0])
                return await s.results[1].items()

        remaining = asyncio.run(scenario())
        assert [r.precinct_id for r in remaining] == ["BV2"]


class TestSession:
    def test_close_signs_out(self, election, make_session):
        session = make_session(role=Role.SUPERVISOR, email="sup@mairie.test")

        async def read_lists():
            async with session as s:
                return await s.lists.items()

        assert len(asyncio.run(read_lists())) == 3
        assert session.tokens.get_access_token() is None

        with pytest.raises(AuthenticationRequired):
            asyncio.run(read_lists())
