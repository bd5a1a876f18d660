"""Ordered, typed column layouts and the row codec built on them."""

import json
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ValidationError

from sheets_client.exceptions import RowDecodeError

_WS = re.compile(r"\s")
_TRUE = {"TRUE", "1", "YES", "ON", "OUI", "VRAI"}


class Kind(StrEnum):
    TEXT = "text"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    JSON = "json"
    INT_LIST = "int_list"


@dataclass(frozen=True)
class Column:
    field: str
    kind: Kind = Kind.TEXT
    width: int = 1
    headers: tuple[str, ...] = ()

    def header_cells(self) -> list[str]:
        if self.headers:
            return list(self.headers)
        return [self.field] if self.width == 1 else [f"{self.field}_{i}" for i in range(self.width)]


def _to_int(raw: str) -> int:
    text = _WS.sub("", raw)
    if not text:
        return 0
    return int(text)


def _to_float(raw: str) -> float:
    text = _WS.sub("", raw).replace(",", ".")
    return float(text) if text else 0.0


def _decode_cell(kind: Kind, raw: str, default: Any = None) -> Any:
    raw = raw.strip()
    if kind == Kind.INT:
        return _to_int(raw)
    if kind == Kind.FLOAT:
        return _to_float(raw)
    if kind == Kind.BOOL:
        return raw.upper() in _TRUE
    if kind == Kind.JSON:
        return json.loads(raw) if raw else default
    return raw


def _encode_cell(kind: Kind, value: Any) -> str:
    if kind == Kind.BOOL:
        return "TRUE" if value else "FALSE"
    if kind == Kind.FLOAT:
        return f"{float(value or 0):.2f}".rstrip("0").rstrip(".")
    if kind == Kind.JSON:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class TableSchema:
    """Column layout of one table and the model its rows decode into."""

    table: str
    model: type[BaseModel]
    columns: tuple[Column, ...]
    scope_field: str | None = None

    @property
    def width(self) -> int:
        return sum(c.width for c in self.columns)

    def header(self) -> list[str]:
        return [h for c in self.columns for h in c.header_cells()]

    def decode(self, values: Sequence[str], offset: int | None = None) -> BaseModel:
        """Raw cells -> validated model. Short rows are padded with blanks."""
        cells = list(values) + [""] * max(0, self.width - len(values))
        data: dict[str, Any] = {}
        pos = 0
        try:
            for col in self.columns:
                if col.kind == Kind.INT_LIST:
                    data[col.field] = [_to_int(c.strip()) for c in cells[pos : pos + col.width]]
                else:
                    default = self.model.model_fields[col.field].get_default(call_default_factory=True)
                    data[col.field] = _decode_cell(col.kind, cells[pos], default)
                pos += col.width
            return self.model.model_validate(data)
        except (ValueError, ValidationError) as e:
            raise RowDecodeError(self.table, offset, str(e)) from e

    def encode(self, item: BaseModel) -> list[str]:
        """Model -> cell strings in column order."""
        if not isinstance(item, self.model):
            raise TypeError(f"{self.table} expects {self.model.__name__}, got {type(item).__name__}")
        dumped = item.model_dump(mode="json")
        cells: list[str] = []
        for col in self.columns:
            value = dumped[col.field]
            if col.kind == Kind.INT_LIST:
                padded = list(value) + [0] * max(0, col.width - len(value))
                cells.extend(str(v) for v in padded[: col.width])
            else:
                cells.append(_encode_cell(col.kind, value))
        return cells

    def scope_of(self, item: BaseModel) -> str | None:
        """Precinct id an item belongs to, for precinct-scoped tables."""
        if self.scope_field is None:
            return None
        return str(getattr(item, self.scope_field))
