"""A1 range notation helpers."""

import unicodedata
from dataclasses import dataclass

HEADER_ROWS = 1
DEFAULT_RANGE = "A:Z"


@dataclass(frozen=True)
class RowRef:
    """Physical position of a data row: 0-based offset after the header.

    Only produced by reads; never build one from field values.
    """

    table: str
    offset: int

    @property
    def sheet_row(self) -> int:
        """1-based sheet row number."""
        return self.offset + HEADER_ROWS + 1


def normalize_sheet_name(name: str) -> str:
    """Strip accents and surrounding whitespace ("Résultats_R1" -> "Resultats_R1")."""
    raw = str(name or "").strip()
    decomposed = unicodedata.normalize("NFD", raw)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def column_letter(index: int) -> str:
    """0-based column index to A1 letters (0 -> A, 26 -> AA)."""
    if index < 0:
        raise ValueError(f"Negative column index: {index}")
    n = index + 1
    letters = ""
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


def a1(sheet: str, cells: str = DEFAULT_RANGE) -> str:
    """Quoted A1 range: 'Sheet Name'!A:Z (single quotes doubled)."""
    safe = normalize_sheet_name(sheet).replace("'", "''")
    return f"'{safe}'!{cells}"


def row_range(ref: RowRef, width: int, first_column: int = 0) -> str:
    """A1 range covering one data row, `width` cells wide."""
    row = ref.sheet_row
    start = column_letter(first_column)
    end = column_letter(first_column + max(width, 1) - 1)
    return a1(ref.table, f"{start}{row}:{end}{row}")
