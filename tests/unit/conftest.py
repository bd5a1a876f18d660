"""Shared fixtures: an in-memory spreadsheet served through httpx.MockTransport."""

import asyncio
import json
import re

import httpx
import pytest

from app.container import Container
from app.models.audit import AUDIT_SCHEMA
from app.models.common import TableSchema
from app.models.election import STATE_SCHEMA
from app.models.reference import CANDIDATE_SCHEMA, PRECINCT_SCHEMA, CandidateList, Precinct
from app.models.tally import (
    PARTICIPATION_R1_SCHEMA,
    PARTICIPATION_R2_SCHEMA,
    RESULTS_R1_SCHEMA,
    RESULTS_R2_SCHEMA,
    ResultRecord,
)
from app.repositories.access import Actor, Role
from sheets_client import SheetsClient, StaticTokenProvider
from sheets_client.ranges import normalize_sheet_name

SPREADSHEET_ID = "test-sheet"

_CELL = re.compile(r"^([A-Z]+)(\d*)$")


def _col(letters: str) -> int:
    n = 0
    for ch in letters:
        n = n * 26 + ord(ch) - 64
    return n - 1


def _parse(rng: str) -> tuple[str, int, int | None, int | None]:
    """'Sheet'!A5:K5 -> (sheet, first column, first row, last row); rows are 1-based."""
    sheet_part, cells = rng.rsplit("!", 1)
    sheet = sheet_part[1:-1].replace("''", "'")
    start, _, end = cells.partition(":")
    c1, r1 = _CELL.match(start).groups()
    _, r2 = _CELL.match(end or start).groups()
    return sheet, _col(c1), int(r1) if r1 else None, int(r2) if r2 else None


def _trim(row: list[str]) -> list[str]:
    row = list(row)
    while row and row[-1] == "":
        row.pop()
    return row


class FakeSpreadsheet:
    """Values API subset: batchGet, batchUpdate, append, clear and PUT on a range."""

    def __init__(self):
        self.sheets: dict[str, list[list[str]]] = {}
        self.requests: list[httpx.Request] = []
        self.queued: list[httpx.Response] = []
        self.gate: asyncio.Event | None = None

    # ========== Test helpers ==========

    def seed(self, schema: TableSchema, items: list) -> None:
        self.sheets[normalize_sheet_name(schema.table)] = [schema.header()] + [schema.encode(i) for i in items]

    def raw(self, table: str) -> list[list[str]]:
        """Data rows (header excluded) as stored."""
        return [_trim(r) for r in self.sheets.get(normalize_sheet_name(table), [])[1:]]

    def decoded(self, schema: TableSchema) -> list:
        return [schema.decode(r) for r in self.raw(schema.table) if any(c.strip() for c in r)]

    def fail(self, status: int, times: int = 1, headers: dict | None = None) -> None:
        for _ in range(times):
            self.queued.append(httpx.Response(status, headers=headers, json={"error": {"message": f"fake {status}"}}))

    def calls(self, method: str | None = None) -> list[httpx.Request]:
        return [r for r in self.requests if method is None or r.method == method]

    # ========== Grid ==========

    def _get(self, rng: str) -> list[list[str]]:
        sheet, _, _, _ = _parse(rng)
        rows = [_trim(r) for r in self.sheets.get(sheet, [])]
        while rows and not rows[-1]:
            rows.pop()
        return rows

    def _put(self, rng: str, values: list[list[str]]) -> None:
        sheet, col, row, _ = _parse(rng)
        grid = self.sheets.setdefault(sheet, [])
        for i, new in enumerate(values):
            idx = (row or 1) - 1 + i
            while len(grid) <= idx:
                grid.append([])
            target = grid[idx]
            while len(target) < col + len(new):
                target.append("")
            target[col : col + len(new)] = [str(v) for v in new]

    def _append(self, rng: str, values: list[list[str]]) -> None:
        sheet, _, _, _ = _parse(rng)
        grid = self.sheets.setdefault(sheet, [])
        while grid and not _trim(grid[-1]):
            grid.pop()
        grid.extend([str(v) for v in row] for row in values)

    def _clear(self, rng: str) -> None:
        sheet, _, first, last = _parse(rng)
        grid = self.sheets.setdefault(sheet, [])
        if first is None:
            grid.clear()
            return
        for idx in range(first - 1, min(last, len(grid))):
            grid[idx] = []

    # ========== Transport ==========

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.queued:
            return self.queued.pop(0)

        path = request.url.path.split(f"/{SPREADSHEET_ID}", 1)[1]
        body = json.loads(request.content) if request.content else {}

        if path == "/values:batchGet":
            rng = request.url.params["ranges"]
            return httpx.Response(200, json={"valueRanges": [{"range": rng, "values": self._get(rng)}]})
        if path == "/values:batchUpdate":
            for item in body["data"]:
                self._put(item["range"], item["values"])
            return httpx.Response(200, json={"totalUpdatedRows": len(body["data"])})

        rng = path.removeprefix("/values/")
        if rng.endswith(":append"):
            self._append(rng.removesuffix(":append"), body["values"])
            return httpx.Response(200, json={"updates": {"updatedRows": len(body["values"])}})
        if rng.endswith(":clear"):
            self._clear(rng.removesuffix(":clear"))
            return httpx.Response(200, json={"clearedRange": rng})
        if request.method == "PUT":
            self._put(rng, body["values"])
            return httpx.Response(200, json={"updatedRange": rng})
        return httpx.Response(404, json={"error": {"message": f"Unknown endpoint {path}"}})


def _client_options(fake: FakeSpreadsheet, options: dict) -> dict:
    options.setdefault("backoff_min", 0)
    options.setdefault("backoff_max", 0)
    options.setdefault("transport", httpx.MockTransport(fake.handler))
    return options


@pytest.fixture
def fake() -> FakeSpreadsheet:
    return FakeSpreadsheet()


@pytest.fixture
def make_client(fake):
    def factory(token: str | None = "test-token", **options) -> SheetsClient:
        return SheetsClient(StaticTokenProvider(token), SPREADSHEET_ID, **_client_options(fake, options))

    return factory


@pytest.fixture
def make_session(fake):
    def factory(
        role: Role = Role.ADMINISTRATOR,
        precinct_id: str | None = None,
        email: str = "admin@mairie.test",
        token: str | None = "test-token",
        **options,
    ) -> Container:
        actor = Actor(role, precinct_id, email)
        return Container(actor, StaticTokenProvider(token), spreadsheet_id=SPREADSHEET_ID, **_client_options(fake, options))

    return factory


PRECINCTS = [
    Precinct(id="BV1", name="Ecole Jaures", registered=1000),
    Precinct(id="BV2", name="Mairie", registered=800),
    Precinct(id="BV3", name="Gymnase", registered=600),
]

LISTS = [
    CandidateList(list_id="L1", name="Liste A", order=1),
    CandidateList(list_id="L2", name="Liste B", order=2),
    CandidateList(list_id="L3", name="Liste C", order=3),
]

RESULTS_R1 = [
    ResultRecord(
        precinct_id="BV1", round=1, registered=1000, turnout=620, blank=10, null=10, expressed=600,
        votes={"L1": 300, "L2": 200, "L3": 100}, submitter="op1",
    ),
    ResultRecord(
        precinct_id="BV2", round=1, registered=800, turnout=500, blank=5, null=5, expressed=490,
        votes={"L1": 220, "L2": 180, "L3": 90}, submitter="op2",
    ),
]


@pytest.fixture
def election(fake) -> FakeSpreadsheet:
    """Three precincts, three lists, two round-1 result sheets, empty state and audit log."""
    fake.seed(PRECINCT_SCHEMA, PRECINCTS)
    fake.seed(CANDIDATE_SCHEMA, LISTS)
    fake.seed(RESULTS_R1_SCHEMA, RESULTS_R1)
    for schema in (PARTICIPATION_R1_SCHEMA, PARTICIPATION_R2_SCHEMA, RESULTS_R2_SCHEMA):
        fake.seed(schema, [])
    fake.seed(STATE_SCHEMA, [])
    fake.seed(AUDIT_SCHEMA, [])
    return fake
