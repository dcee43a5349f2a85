"""
Tabular store abstraction.

The core never talks to a spreadsheet directly. It reads and writes
rectangular regions of cells through a ``Source`` obtained from a
``TabularStore``. Rows and columns are 1-based, as in a spreadsheet.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Optional, Protocol, Sequence

from .cells import EMPTY, Cell, CellKind
from .errors import SourceNotFound


class Source(Protocol):
    name: str

    def read_region(
        self, row_start: int, col_start: int, row_count: int, col_count: int
    ) -> list[list[Cell]]: ...

    def write_region(
        self, row_start: int, col_start: int, grid: Sequence[Sequence[Cell]]
    ) -> None: ...

    def last_data_row(self) -> int: ...

    def last_data_column(self) -> int: ...


class TabularStore(Protocol):
    def open_source(self, reference: str) -> Source: ...

    def source_names(self) -> list[str]: ...


def normalize_tab_name(name: str) -> str:
    return re.sub(r"\s+", " ", str(name or "")).strip().lower()


def match_tab_name(names: Iterable[str], reference: str) -> Optional[str]:
    """
    Find a tab by name: exact match first, then a loose match that ignores
    case, surrounding whitespace and repeated inner whitespace.
    """
    names = list(names)
    if reference in names:
        return reference
    wanted = normalize_tab_name(reference)
    for name in names:
        if normalize_tab_name(name) == wanted:
            return name
    return None


def read_all(source: Source, first_row: int = 1) -> list[list[Cell]]:
    """Read every row from ``first_row`` to the last populated row, full width."""
    last_row = source.last_data_row()
    width = source.last_data_column()
    if last_row < first_row or width < 1:
        return []
    return source.read_region(first_row, 1, last_row - first_row + 1, width)


class MemorySource:
    """A source backed by a sparse dict of cells."""

    def __init__(self, name: str, rows: Optional[Sequence[Sequence[Any]]] = None) -> None:
        self.name = name
        self._cells: dict[tuple[int, int], Cell] = {}
        self.write_count = 0
        if rows:
            for r, row in enumerate(rows, start=1):
                for c, value in enumerate(row, start=1):
                    self._set(r, c, Cell.of(value))

    def _set(self, row: int, col: int, cell: Cell) -> None:
        if cell.kind is CellKind.EMPTY:
            self._cells.pop((row, col), None)
        else:
            self._cells[(row, col)] = cell

    def read_region(
        self, row_start: int, col_start: int, row_count: int, col_count: int
    ) -> list[list[Cell]]:
        return [
            [
                self._cells.get((row_start + r, col_start + c), EMPTY)
                for c in range(col_count)
            ]
            for r in range(row_count)
        ]

    def write_region(
        self, row_start: int, col_start: int, grid: Sequence[Sequence[Cell]]
    ) -> None:
        for r, row in enumerate(grid):
            for c, value in enumerate(row):
                self._set(row_start + r, col_start + c, Cell.of(value))
        self.write_count += 1

    def last_data_row(self) -> int:
        return max((row for row, _col in self._cells), default=0)

    def last_data_column(self) -> int:
        return max((col for _row, col in self._cells), default=0)

    def values(self) -> list[list[Any]]:
        """Raw values of the populated area, for assertions and debugging."""
        return [
            [cell.raw for cell in row]
            for row in self.read_region(1, 1, self.last_data_row(), self.last_data_column())
        ]


class MemoryStore:
    def __init__(self, sources: Optional[dict[str, Sequence[Sequence[Any]]]] = None) -> None:
        self._sources: dict[str, MemorySource] = {}
        for name, rows in (sources or {}).items():
            self.add_source(name, rows)

    def add_source(
        self, name: str, rows: Optional[Sequence[Sequence[Any]]] = None
    ) -> MemorySource:
        source = MemorySource(name, rows)
        self._sources[name] = source
        return source

    def open_source(self, reference: str) -> MemorySource:
        name = match_tab_name(self._sources, reference)
        if name is None:
            raise SourceNotFound(reference)
        return self._sources[name]

    def source_names(self) -> list[str]:
        return list(self._sources)
