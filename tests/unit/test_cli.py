"""Tests for the command-line entry point."""

import sys

import pytest

import tally as cli


class TestMain:
    def test_operator_without_precinct_exits_cleanly(self, monkeypatch):
        monkeypatch.setenv("ELECTION_ROLE", "PRECINCT_OPERATOR")
        monkeypatch.delenv("ELECTION_PRECINCT", raising=False)
        monkeypatch.setattr(sys, "argv", ["tally.py", "state"])

        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 2

    def test_unknown_role_exits_cleanly(self, monkeypatch):
        monkeypatch.setenv("ELECTION_ROLE", "MAYOR")
        monkeypatch.setattr(sys, "argv", ["tally.py", "state"])

        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 2

    def test_help_needs_no_actor(self, monkeypatch, capsys):
        monkeypatch.setenv("ELECTION_ROLE", "MAYOR")
        monkeypatch.setattr(sys, "argv", ["tally.py", "--help"])

        cli.main()
        assert "Usage:" in capsys.readouterr().out
