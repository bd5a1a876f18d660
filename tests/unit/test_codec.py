"""Tests for row schemas, the codec registry and A1 ranges."""

import pytest

from app.models import ALL_SCHEMAS, Table, schema_for
from app.models.election import STATE_SCHEMA, ElectionState, StateEntry
from app.models.reference import CANDIDATE_SCHEMA, PRECINCT_SCHEMA, CandidateList
from app.models.seats import SEATS_MUNICIPAL_SCHEMA, SeatAllocation
from app.models.tally import PARTICIPATION_R1_SCHEMA, RESULTS_R1_SCHEMA, ResultRecord
from settings import PARTICIPATION_HOURS
from sheets_client import RowDecodeError
from sheets_client.ranges import RowRef, a1, column_letter, normalize_sheet_name, row_range


_SAMPLES = [str(60 * i) for i in range(1, len(PARTICIPATION_HOURS) + 1)]

CANONICAL_ROWS = {
    Table.PRECINCTS: ["BV1", "Ecole Jaures", "2 rue Haute", "M. Martin", "Mme Roux", "", "1000", "TRUE"],
    Table.LISTS: ["L1", "Liste A", "Durand", "Anne", "#0055A4", "1", "TRUE", "FALSE"],
    Table.PARTICIPATION_R1: ["BV1", "1", "1000", *_SAMPLES, "2026-03-15T20:00:00"],
    Table.PARTICIPATION_R2: ["BV2", "2", "800", *_SAMPLES, "2026-03-22T20:00:00"],
    Table.RESULTS_R1: ["BV2", "1", "800", "500", "5", "5", "490", '{"L1":290,"L2":200}', "op@x", "sup@x", "2026-03-15T20:10:00"],
    Table.RESULTS_R2: ["BV1", "2", "1000", "640", "8", "2", "630", '{"L1":330,"L2":300}', "op@x", "", "2026-03-22T20:05:00"],
    Table.ELECTION_STATE: ["round2_gate", "TRUE", "2026-03-16T09:00:00+00:00"],
    Table.SEATS_MUNICIPAL: ["L1", "Liste A", "520", "52.5", "18", "7", "25", "TRUE"],
    Table.SEATS_COMMUNITY: ["L2", "Liste B", "300", "30", "0", "2", "2", "TRUE"],
    Table.AUDIT_LOG: [
        "2026-03-16T09:00:00+00:00",
        "LOCK",
        "ElectionState",
        "ROUND1",
        '{"round1_locked":false}',
        '{"round1_locked":true}',
        "admin@mairie.test",
    ],
}


class TestRegistry:
    def test_every_table_has_a_schema(self):
        assert set(ALL_SCHEMAS) == set(Table)

    def test_lookup_by_sheet_name(self):
        assert schema_for("Results_R1") is RESULTS_R1_SCHEMA

    def test_unknown_table(self):
        with pytest.raises(KeyError):
            schema_for("Nope")


class TestDecode:
    def test_blank_numbers_and_bools(self):
        p = PRECINCT_SCHEMA.decode(["BV1", "Ecole", "", "", "", "", "", ""])
        assert p.registered == 0
        assert p.active is False

    def test_short_row_is_padded(self):
        c = CANDIDATE_SCHEMA.decode(["L1", "Liste A"])
        assert c.list_id == "L1"
        assert c.order == 0
        assert c.active_round2 is False

    def test_bool_case_insensitive(self):
        c = CANDIDATE_SCHEMA.decode(["L1", "A", "", "", "", "2", "true", "Vrai"])
        assert c.active_round1 is True
        assert c.active_round2 is True

    def test_thousands_spaces_in_ints(self):
        p = PRECINCT_SCHEMA.decode(["BV1", "Ecole", "", "", "", "", "1 204", "TRUE"])
        assert p.registered == 1204

    def test_json_votes(self):
        row = ["BV1", "1", "1000", "620", "10", "10", "600", '{"L1":400,"L2":200}', "op", "", ""]
        r = RESULTS_R1_SCHEMA.decode(row)
        assert r.votes == {"L1": 400, "L2": 200}
        assert r.votes_total == 600
        assert not r.validated

    def test_participation_spread_columns(self):
        row = ["BV1", "1", "900"] + ["10", "20"] + [""] * 11 + ["2026-03-15T10:00:00"]
        p = PARTICIPATION_R1_SCHEMA.decode(row)
        assert len(p.samples) == len(PARTICIPATION_HOURS)
        assert p.samples[:3] == [10, 20, 0]
        assert p.latest() == 20

    def test_bad_int_raises_with_offset(self):
        with pytest.raises(RowDecodeError) as exc:
            PRECINCT_SCHEMA.decode(["BV1", "Ecole", "", "", "", "", "many", "TRUE"], offset=4)
        assert exc.value.table == Table.PRECINCTS
        assert exc.value.offset == 4

    def test_negative_votes_rejected(self):
        row = ["BV1", "1", "0", "0", "0", "0", "0", '{"L1":-3}']
        with pytest.raises(RowDecodeError):
            RESULTS_R1_SCHEMA.decode(row)


class TestEncode:
    def test_canonical_row_for_every_table(self):
        assert set(CANONICAL_ROWS) == set(ALL_SCHEMAS)

    @pytest.mark.parametrize("table", list(CANONICAL_ROWS))
    def test_round_trip(self, table):
        schema = ALL_SCHEMAS[table]
        row = CANONICAL_ROWS[table]
        assert schema.encode(schema.decode(row)) == row

    def test_floats_written_without_padding(self):
        row = SEATS_MUNICIPAL_SCHEMA.encode(SeatAllocation(list_id="L1", percentage=8.0))
        assert row[3] == "8"
        row = SEATS_MUNICIPAL_SCHEMA.encode(SeatAllocation(list_id="L1", percentage=33.3333))
        assert row[3] == "33.33"

    def test_header_matches_width(self):
        for schema in ALL_SCHEMAS.values():
            assert len(schema.header()) == schema.width

    def test_participation_header(self):
        header = PARTICIPATION_R1_SCHEMA.header()
        assert header[3] == "voters_08h"
        assert header[-2] == "voters_20h"

    def test_wrong_model(self):
        with pytest.raises(TypeError):
            CANDIDATE_SCHEMA.encode(ResultRecord(precinct_id="BV1"))

    def test_unicode_json_kept(self):
        r = ResultRecord(precinct_id="BV1", votes={"Liste Écologie": 3})
        assert '"Liste Écologie":3' in RESULTS_R1_SCHEMA.encode(r)[7]

    def test_scope(self):
        assert RESULTS_R1_SCHEMA.scope_of(ResultRecord(precinct_id="BV9")) == "BV9"
        assert CANDIDATE_SCHEMA.scope_of(CandidateList(list_id="L1")) is None


class TestElectionState:
    def test_defaults_when_empty(self):
        state = ElectionState.from_entries([])
        assert state.current_round == 1
        assert state.phase == "ROUND1_OPEN"

    def test_tolerant_flags_and_lists(self):
        entries = [
            StateEntry(key="current_round", value="2"),
            StateEntry(key="round1_locked", value="oui"),
            StateEntry(key="round2_gate", value="Actif"),
            StateEntry(key="qualified_lists", value="L1, L3"),
        ]
        state = ElectionState.from_entries(entries)
        assert state.round1_locked and state.round2_gate
        assert state.qualified_lists == ["L1", "L3"]
        assert state.phase == "ROUND2_OPEN"

    def test_unknown_keys_kept(self):
        state = ElectionState.from_entries([StateEntry(key="mayor_elected", value="L1")])
        assert state.extras == {"mayor_elected": "L1"}
        assert "mayor_elected" not in state.to_cells()

    def test_cells_round_trip(self):
        state = ElectionState(current_round=2, round1_locked=True, qualified_lists=["L1", "L2"])
        entries = [StateEntry(key=k, value=v) for k, v in state.to_cells().items()]
        assert ElectionState.from_entries(entries) == state

    def test_state_schema_width(self):
        assert STATE_SCHEMA.header() == ["key", "value", "updated_at"]


class TestRanges:
    def test_column_letters(self):
        assert column_letter(0) == "A"
        assert column_letter(25) == "Z"
        assert column_letter(26) == "AA"

    def test_accents_stripped_and_quoted(self):
        assert normalize_sheet_name(" Résultats_T1 ") == "Resultats_T1"
        assert a1("Résultats_T1") == "'Resultats_T1'!A:Z"

    def test_single_quotes_doubled(self):
        assert a1("Bureau d'Orléans", "A1:B1") == "'Bureau d''Orleans'!A1:B1"

    def test_row_range(self):
        assert row_range(RowRef("Lists", 0), 8) == "'Lists'!A2:H2"
        assert RowRef("Lists", 3).sheet_row == 5
