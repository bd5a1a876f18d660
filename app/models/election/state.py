"""Election state - key/value/timestamp rows owned by the state machine."""

import json
from collections.abc import Iterable

from pydantic import BaseModel, Field

from app.models.common.schema import Column, TableSchema
from app.models.common.tables import Table
from app.models.election.entities import Phase
from settings import ROUND1_DATE, ROUND2_DATE

_TRUE = {"true", "1", "yes", "on", "oui", "vrai", "actif", "enabled"}


class StateEntry(BaseModel):
    key: str = Field(min_length=1)
    value: str = ""
    updated_at: str = ""


STATE_SCHEMA = TableSchema(
    table=Table.ELECTION_STATE,
    model=StateEntry,
    columns=(Column("key"), Column("value"), Column("updated_at")),
)


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in _TRUE


def _as_list(raw: str) -> list[str]:
    text = raw.strip()
    if not text:
        return []
    if text.startswith("["):
        return [str(v) for v in json.loads(text)]
    return [part.strip() for part in text.split(",") if part.strip()]


class ElectionState(BaseModel):
    """Typed view of the state table. Keys this code does not know are kept in `extras`."""

    current_round: int = Field(default=1, ge=1, le=2)
    round1_locked: bool = False
    round2_locked: bool = False
    round2_gate: bool = False
    qualified_lists: list[str] = Field(default_factory=list)
    qualification_override: bool = False
    round1_date: str = ROUND1_DATE
    round2_date: str = ROUND2_DATE
    extras: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def known_keys(cls) -> list[str]:
        return [name for name in cls.model_fields if name != "extras"]

    @classmethod
    def from_entries(cls, entries: Iterable[StateEntry]) -> "ElectionState":
        raw: dict[str, str] = {}
        for entry in entries:
            raw[entry.key] = entry.value

        data: dict = {}
        for key in cls.known_keys():
            if key not in raw or raw[key].strip() == "":
                continue
            value = raw[key]
            if key == "current_round":
                data[key] = int(value.strip())
            elif key == "qualified_lists":
                data[key] = _as_list(value)
            elif key in ("round1_date", "round2_date"):
                data[key] = value.strip()
            else:
                data[key] = _as_bool(value)

        data["extras"] = {k: v for k, v in raw.items() if k not in cls.known_keys()}
        return cls.model_validate(data)

    def to_cells(self) -> dict[str, str]:
        """Known keys as cell text."""
        cells: dict[str, str] = {}
        for key in self.known_keys():
            value = getattr(self, key)
            if isinstance(value, bool):
                cells[key] = "TRUE" if value else "FALSE"
            elif isinstance(value, list):
                cells[key] = json.dumps(value, separators=(",", ":"))
            else:
                cells[key] = str(value)
        return cells

    @property
    def phase(self) -> Phase:
        if self.current_round == 1:
            return Phase.ROUND1_LOCKED if self.round1_locked else Phase.ROUND1_OPEN
        return Phase.ROUND2_LOCKED if self.round2_locked else Phase.ROUND2_OPEN

    def is_locked(self, round_: int) -> bool:
        return self.round1_locked if round_ == 1 else self.round2_locked
