"""
openpyxl-backed ``TabularStore``.

A workbook is opened twice: once with formulas kept as text, which is the
copy that gets edited and saved, and once with the results the spreadsheet
app saved for those formulas, which is what reads return. A formula moved
to another cell of its own sheet is re-anchored; anywhere else only its
result is written.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.formula.translate import Translator
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .cells import Cell, Formula
from .errors import SourceNotFound
from .store import match_tab_name

logger = logging.getLogger(__name__)


def is_formula(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("=") and len(value) > 1


def coordinate(row: int, column: int) -> str:
    return f"{get_column_letter(column)}{row}"


class WorksheetSource:
    """``Source`` over one openpyxl worksheet and its saved formula results."""

    def __init__(
        self,
        worksheet: Worksheet,
        results: Worksheet,
        *,
        book: str = "",
        on_write: Optional[Callable[[], None]] = None,
    ) -> None:
        self._ws = worksheet
        self._results = results
        self._book = book
        self._on_write = on_write
        self._warned_uncached = False
        self.name = worksheet.title

    def read_region(
        self, row_start: int, col_start: int, row_count: int, col_count: int
    ) -> list[list[Cell]]:
        if row_count < 1 or col_count < 1:
            return []
        bounds = dict(
            min_row=row_start,
            max_row=row_start + row_count - 1,
            min_col=col_start,
            max_col=col_start + col_count - 1,
            values_only=True,
        )
        grid: list[list[Cell]] = []
        rows = zip(self._ws.iter_rows(**bounds), self._results.iter_rows(**bounds))
        for r, (stored, results) in enumerate(rows):
            cells: list[Cell] = []
            for c, (value, result) in enumerate(zip(stored, results)):
                if is_formula(value):
                    cells.append(self._formula_cell(value, result, row_start + r, col_start + c))
                else:
                    cells.append(Cell.of(value))
            grid.append(cells)
        return grid

    def _formula_cell(self, text: str, result: Any, row: int, column: int) -> Cell:
        if result is None and not self._warned_uncached:
            self._warned_uncached = True
            logger.warning(
                "%s: formula in %s has no saved result and reads as blank; "
                "open and save the workbook in a spreadsheet app first",
                self.name,
                coordinate(row, column),
            )
        cell = Cell.of(result)
        formula = Formula(text=text, book=self._book, sheet=self.name, row=row, column=column)
        return Cell(cell.kind, cell.value, formula=formula)

    def write_region(
        self, row_start: int, col_start: int, grid: Sequence[Sequence[Cell]]
    ) -> None:
        for r, row in enumerate(grid):
            for c, value in enumerate(row):
                cell = Cell.of(value)
                target_row, target_col = row_start + r, col_start + c
                self._ws.cell(row=target_row, column=target_col).value = self._stored_value(
                    cell, target_row, target_col
                )
                # later reads in this run see the written value; a new formula has none yet
                result = cell.raw
                self._results.cell(row=target_row, column=target_col).value = (
                    None if is_formula(result) else result
                )
        if self._on_write:
            self._on_write()

    def _stored_value(self, cell: Cell, row: int, column: int) -> Any:
        formula = cell.formula
        if formula is None or (formula.book, formula.sheet) != (self._book, self.name):
            return cell.raw
        if (formula.row, formula.column) == (row, column):
            return formula.text
        origin = coordinate(formula.row, formula.column)
        return Translator(formula.text, origin=origin).translate_formula(coordinate(row, column))

    def last_data_row(self) -> int:
        # max_row also counts cells that only carry formatting
        for index in range(self._ws.max_row, 0, -1):
            values = next(
                self._ws.iter_rows(min_row=index, max_row=index, values_only=True), ()
            )
            if any(value not in (None, "") for value in values):
                return index
        return 0

    def last_data_column(self) -> int:
        for index in range(self._ws.max_column, 0, -1):
            values = next(
                self._ws.iter_cols(min_col=index, max_col=index, values_only=True), ()
            )
            if any(value not in (None, "") for value in values):
                return index
        return 0


class WorkbookStore:
    """``TabularStore`` over an .xlsx workbook; changes are kept until ``save``."""

    def __init__(self, path: Path, *, read_only: bool = False) -> None:
        self.path = path
        self.read_only = read_only
        # formulas are kept as text so that saving does not flatten them
        self._wb = load_workbook(path)
        self._results = load_workbook(path, data_only=True)
        self.dirty = False

    def open_source(self, reference: str) -> WorksheetSource:
        name = match_tab_name(self._wb.sheetnames, reference)
        if name is None:
            raise SourceNotFound(reference)
        return WorksheetSource(
            self._wb[name],
            self._results[name],
            book=str(self.path),
            on_write=self._mark_dirty,
        )

    def source_names(self) -> list[str]:
        return list(self._wb.sheetnames)

    def _mark_dirty(self) -> None:
        self.dirty = True

    def save(self) -> bool:
        if self.read_only:
            logger.debug("Workbook %s opened read-only; not saving", self.path)
            return False
        if not self.dirty:
            logger.debug("Workbook %s unchanged; not saving", self.path)
            return False
        self._wb.save(self.path)
        self.dirty = False
        logger.info("Saved %s", self.path)
        return True

    def close(self) -> None:
        self._wb.close()
        self._results.close()
