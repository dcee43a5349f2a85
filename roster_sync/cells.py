"""
Tagged cell values exchanged with a tabular store.

A cell read from a workbook may hold text, a number, a boolean (checkbox),
a date or nothing at all. Every "is this a date / is this ticked" decision
in roster-sync goes through the ``CellKind`` tag instead of probing Python
types at the call site.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional

TEXT_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%m-%d-%Y",
    "%m-%d-%y",
    "%d %B %Y",
    "%B %d, %Y",
    "%b %d, %Y",
)

_DIGITS = re.compile(r"^\d+$")


class CellKind(Enum):
    EMPTY = "empty"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


@dataclass(frozen=True, slots=True)
class Formula:
    """Formula text of a cell and the workbook position it was read from."""

    text: str
    book: str
    sheet: str
    row: int
    column: int


@dataclass(frozen=True, slots=True)
class Cell:
    kind: CellKind
    value: Any = None
    formula: Optional[Formula] = field(default=None, compare=False)
    """Set when the value was computed by a formula; ``value`` is its last saved result"""

    @classmethod
    def of(cls, raw: Any) -> "Cell":
        if isinstance(raw, Cell):
            return raw
        if raw is None:
            return EMPTY
        # bool is a subclass of int and must be tested first
        if isinstance(raw, bool):
            return cls(CellKind.BOOLEAN, raw)
        if isinstance(raw, (int, float)):
            return cls(CellKind.NUMBER, raw)
        if isinstance(raw, (datetime, date)):
            return cls(CellKind.DATE, raw)
        text = raw if isinstance(raw, str) else str(raw)
        if text == "":
            return EMPTY
        return cls(CellKind.TEXT, text)

    @property
    def is_empty(self) -> bool:
        match self.kind:
            case CellKind.EMPTY:
                return True
            case CellKind.TEXT:
                return not self.value.strip()
            case _:
                return False

    @property
    def text(self) -> str:
        """Display form of the cell, untrimmed."""
        match self.kind:
            case CellKind.EMPTY:
                return ""
            case CellKind.TEXT:
                return self.value
            case CellKind.NUMBER:
                if isinstance(self.value, float) and self.value.is_integer():
                    return str(int(self.value))
                return str(self.value)
            case CellKind.BOOLEAN:
                return "TRUE" if self.value else "FALSE"
            case CellKind.DATE:
                return _as_day(self.value).isoformat()
        return str(self.value)

    def is_checked(self) -> bool:
        match self.kind:
            case CellKind.BOOLEAN:
                return self.value is True
            case _:
                return False

    def as_date(self) -> Optional[date]:
        match self.kind:
            case CellKind.DATE:
                return _as_day(self.value)
            case CellKind.TEXT:
                return parse_date_text(self.value)
            case _:
                return None

    def as_person_id(self) -> Optional[int]:
        """Explicit person ID held by the cell, if it is a non-negative integer."""
        match self.kind:
            case CellKind.NUMBER:
                value = self.value
                if isinstance(value, float):
                    if not value.is_integer():
                        return None
                    value = int(value)
                return value if value >= 0 else None
            case CellKind.TEXT:
                stripped = self.value.strip()
                if not _DIGITS.match(stripped):
                    return None
                return int(stripped)
            case _:
                return None

    def as_number(self) -> Optional[float]:
        match self.kind:
            case CellKind.NUMBER:
                return float(self.value)
            case CellKind.TEXT:
                try:
                    return float(self.value.strip())
                except ValueError:
                    return None
            case _:
                return None

    @property
    def raw(self) -> Any:
        """Plain Python value for writing back into a store."""
        if self.kind is CellKind.EMPTY:
            return None
        return self.value


EMPTY = Cell(CellKind.EMPTY)


def parse_date_text(value: str) -> Optional[date]:
    text = value.strip()
    if not text:
        return None
    try:
        return _as_day(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in TEXT_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def to_cells(values: Iterable[Any]) -> list[Cell]:
    return [Cell.of(value) for value in values]


def blank_row(width: int) -> list[Cell]:
    return [EMPTY] * width


def cell_at(row: list[Cell] | tuple[Cell, ...], column: Optional[int]) -> Cell:
    """Cell at a 1-based column, EMPTY when the row is shorter or no column is set."""
    if not column or column < 1 or column > len(row):
        return EMPTY
    return row[column - 1]


def _as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value
