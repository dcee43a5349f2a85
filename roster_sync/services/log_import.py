"""
Applying the attendance log to the roster tabs.

Log rows not yet marked "Logged" are routed by their event label: Sunday
services tick the service grid, pastoral check-ins update the Pastoral
Check-In tab and every other event ticks the event grid, which gains a
column for an event/date pair it has not seen yet. People the destination
tab does not list are added below its last named row.

Every row that was acted on gets its status and remark written back to the
log, so a second run only picks up what is still pending.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, Optional

from openpyxl.utils import get_column_letter

from ..cells import EMPTY, Cell, cell_at
from ..config import TabSettings
from ..core.attendance import LogEntry, is_pastoral_check_in, is_sunday_service
from ..core.identity import capitalize_name, loose_key, split_full_name
from ..errors import ConfigurationMissing, MalformedRow
from ..store import Source, read_all
from ..tabs import open_tab, read_grid_header, read_roster

if TYPE_CHECKING:  # pragma: no cover
    from ..app import RosterApp

logger = logging.getLogger(__name__)

REMARK_INVALID_DATE = "Skipped: Invalid date format."
REMARK_DUPLICATE = "Duplicate log entry processed."
REMARK_NEW_PERSON = "New person added to directory."
REMARK_NEW_PERSON_NO_DATE = "New person added, but event date not found."

# last row of an .xlsx sheet
MAX_ROW = 1048576

# (status, remark); a status of None leaves the log cell as it is
Outcome = tuple[Optional[str], str]


@dataclass(slots=True)
class ImportReport:
    pending: int
    logged: int = 0
    duplicates: int = 0
    new_people: int = 0
    new_columns: int = 0
    unresolved: int = 0


@dataclass(slots=True)
class PendingRow:
    entry: LogEntry
    person_type: Cell = EMPTY
    notes: Cell = EMPTY
    extra: Cell = EMPTY

    @property
    def key(self) -> Optional[str]:
        return loose_key(self.entry.last_name, self.entry.first_name)

    @property
    def event_name(self) -> str:
        return self.entry.event.text.strip()


class TabEdits:
    """Cell edits to one destination tab, written back as a single region."""

    def __init__(self, source: Source, tab: TabSettings) -> None:
        self.source = source
        self.tab = tab
        snapshot = read_roster(source, tab)
        self._by_row = {row.row: row for row in snapshot.rows}
        self._rows: dict[str, int] = {}
        last_named = tab.data_start_row - 1
        for row in snapshot.rows:
            if row.is_blank:
                continue
            last_named = row.row
            key = loose_key(row.last_name, row.first_name)
            if key and key not in self._rows:
                self._rows[key] = row.row
        self.next_row = last_named + 1
        self._cells: dict[tuple[int, int], Cell] = {}

    def find(self, key: str) -> Optional[int]:
        return self._rows.get(key)

    def add_person(self, key: str, last: str, first: str) -> int:
        row = self.next_row
        self.next_row += 1
        self.set(row, self.tab.last_name_column, capitalize_name(last))
        self.set(row, self.tab.first_name_column, capitalize_name(first))
        self._rows[key] = row
        return row

    def get(self, row: int, column: int) -> Cell:
        edited = self._cells.get((row, column))
        if edited is not None:
            return edited
        existing = self._by_row.get(row)
        return existing.cell(column) if existing else EMPTY

    def set(self, row: int, column: int, value: Any) -> None:
        self._cells[(row, column)] = Cell.of(value)

    def flush(self) -> bool:
        if not self._cells:
            return False
        rows = [row for row, _column in self._cells]
        columns = [column for _row, column in self._cells]
        top, left = min(rows), min(columns)
        grid = self.source.read_region(top, left, max(rows) - top + 1, max(columns) - left + 1)
        for (row, column), cell in self._cells.items():
            grid[row - top][column - left] = cell
        self.source.write_region(top, left, grid)
        logger.info("%s: %d cells updated", self.source.name, len(self._cells))
        self._cells.clear()
        return True


class GridEdits(TabEdits):
    """A checkbox grid tab; event columns are found by date (and event name)."""

    def __init__(self, source: Source, tab: TabSettings, count_row: Optional[int] = None) -> None:
        super().__init__(source, tab)
        if tab.grid is None:
            raise ConfigurationMissing(f"Tab '{tab.name}' has no event grid")
        self.grid = tab.grid
        self.count_row = count_row
        header = read_grid_header(source, tab)
        self.named = header.event_names is not None
        self._columns: dict[tuple[date, str], int] = {}
        for column in header.columns():
            self._columns.setdefault(self._key(column.event_date, column.event_name), column.column)
        self._placeholders: list[int] = []
        if header.event_names is not None:
            width = max(len(header.dates), len(header.event_names))
            for column in range(self.grid.first_column, width + 1):
                name = cell_at(header.event_names, column).text.strip()
                if name == self.grid.placeholder_label and cell_at(header.dates, column).is_empty:
                    self._placeholders.append(column)
        self._next_column = max(source.last_data_column(), self.grid.first_column - 1) + 1

    def _key(self, event_date: date, event_name: str) -> tuple[date, str]:
        if not self.named:
            return event_date, ""
        return event_date, event_name.strip().lower()

    def find_column(self, event_date: date, event_name: str = "") -> Optional[int]:
        return self._columns.get(self._key(event_date, event_name))

    def add_column(self, event_date: date, event_name: str) -> int:
        """Claim the first placeholder column, or append one after the last used column."""
        if self._placeholders:
            column = self._placeholders.pop(0)
        else:
            column = self._next_column
            self._next_column += 1
        self.set(self.grid.date_row, column, event_date)
        if self.grid.event_name_row:
            self.set(self.grid.event_name_row, column, event_name)
        if self.count_row:
            letter = get_column_letter(column)
            self.set(
                self.count_row,
                column,
                f"=COUNTIF({letter}{self.tab.data_start_row}:{letter}{MAX_ROW},TRUE)",
            )
        self._columns[self._key(event_date, event_name)] = column
        logger.info(
            "%s: column %s for %s on %s", self.source.name, get_column_letter(column), event_name, event_date
        )
        return column


class LogImportService:
    """Ticks the roster tabs for every attendance log row that is not logged yet."""

    def __init__(self, app: RosterApp) -> None:
        self.app = app

    def run(self) -> Optional[ImportReport]:
        try:
            return self._run()
        except ConfigurationMissing as exc:
            logger.error("Attendance log import aborted: %s", exc)
            return None

    def _run(self) -> ImportReport:
        log = self.app.settings.attendance_log
        log_source = open_tab(self.app.store, log.name, required=True)
        rows = read_all(log_source, log.data_start_row)

        outcomes: dict[int, Outcome] = {}
        pending: list[PendingRow] = []
        for offset, cells in enumerate(rows):
            if cell_at(cells, log.status_column).text.strip() == log.logged_label:
                continue
            row_number = log.data_start_row + offset
            last = cell_at(cells, log.last_name_column).text.strip()
            first = cell_at(cells, log.first_name_column).text.strip()
            if not (last and first):
                full_name = cell_at(cells, log.full_name_column).text
                if not full_name.strip():
                    continue
                last, first = split_full_name(full_name)
            item = PendingRow(
                entry=LogEntry(
                    row_number,
                    last,
                    first,
                    cell_at(cells, log.event_column),
                    cell_at(cells, log.date_column),
                ),
                person_type=cell_at(cells, log.type_column),
                notes=cell_at(cells, log.notes_column),
                extra=cell_at(cells, log.extra_column),
            )
            if item.entry.event_date.is_empty or not item.event_name or item.key is None:
                continue
            pending.append(item)

        report = ImportReport(pending=len(pending))
        if not pending:
            logger.info("Attendance Log: no new rows to import")
            return report
        logger.info("Attendance Log: importing %d rows", len(pending))

        options = self.app.settings.log_import
        service = self._open(options.service_tab, grid=True)
        events = self._open(options.event_tab, grid=True, count_row=options.event_count_row)
        pastoral = self._open(options.pastoral_tab)

        logged_keys: set[tuple[str, str, date]] = set()
        for item in pending:
            try:
                event_date = item.entry.parsed_date()
            except MalformedRow as exc:
                logger.warning("Attendance Log %s", exc)
                outcomes[item.entry.row] = (None, REMARK_INVALID_DATE)
                report.unresolved += 1
                continue

            log_key = (item.key, item.event_name.lower(), event_date)
            if log_key in logged_keys:
                outcomes[item.entry.row] = (log.logged_label, REMARK_DUPLICATE)
                report.duplicates += 1
                continue

            if is_sunday_service(item.event_name):
                outcome = self._to_service(service, item, event_date, report)
            elif is_pastoral_check_in(item.event_name):
                outcome = self._to_pastoral(pastoral, item, event_date, report)
            else:
                outcome = self._to_events(events, item, event_date, report)
            if outcome is None:
                continue
            outcomes[item.entry.row] = outcome
            if outcome[0] == log.logged_label:
                logged_keys.add(log_key)
                report.logged += 1
            else:
                report.unresolved += 1

        for target in (service, events, pastoral):
            if target is not None:
                target.flush()
        self._write_outcomes(log_source, rows, outcomes)
        logger.info(
            "Attendance Log: %d rows logged, %d duplicates, %d need attention",
            report.logged,
            report.duplicates,
            report.unresolved,
        )
        return report

    def _open(
        self, name: str, *, grid: bool = False, count_row: Optional[int] = None
    ) -> Optional[TabEdits]:
        tab = self.app.settings.tab(name)
        if tab is None:
            logger.warning("Tab '%s' is not configured; its log rows stay pending", name)
            return None
        source = open_tab(self.app.store, tab.name, required=tab.required)
        if source is None:
            return None
        if grid:
            return GridEdits(source, tab, count_row)
        return TabEdits(source, tab)

    def _to_service(
        self, service: Optional[GridEdits], item: PendingRow, event_date: date, report: ImportReport
    ) -> Optional[Outcome]:
        if service is None:
            return None
        logged = self.app.settings.attendance_log.logged_label
        column = service.find_column(event_date)
        row = service.find(item.key)
        if row is None:
            row = service.add_person(item.key, item.entry.last_name, item.entry.first_name)
            report.new_people += 1
            if column is None:
                return None, REMARK_NEW_PERSON_NO_DATE
            service.set(row, column, True)
            return logged, REMARK_NEW_PERSON
        if column is None:
            return "", f"Date not found in {service.tab.name} sheet."
        service.set(row, column, True)
        return logged, ""

    def _to_events(
        self, events: Optional[GridEdits], item: PendingRow, event_date: date, report: ImportReport
    ) -> Optional[Outcome]:
        if events is None:
            return None
        logged = self.app.settings.attendance_log.logged_label
        column = events.find_column(event_date, item.event_name)
        if column is None:
            column = events.add_column(event_date, item.event_name)
            report.new_columns += 1
        row = events.find(item.key)
        remark = ""
        if row is None:
            row = events.add_person(item.key, item.entry.last_name, item.entry.first_name)
            type_column = self.app.settings.log_import.type_column
            if type_column:
                events.set(row, type_column, item.person_type.raw)
            report.new_people += 1
            remark = REMARK_NEW_PERSON
        events.set(row, column, True)
        return logged, remark

    def _to_pastoral(
        self, pastoral: Optional[TabEdits], item: PendingRow, event_date: date, report: ImportReport
    ) -> Optional[Outcome]:
        if pastoral is None:
            return None
        options = self.app.settings.log_import
        row = pastoral.find(item.key)
        remark = ""
        if row is None:
            row = pastoral.add_person(item.key, item.entry.last_name, item.entry.first_name)
            report.new_people += 1
            remark = REMARK_NEW_PERSON
        else:
            recent = pastoral.get(row, options.pastoral_recent_column)
            if not recent.is_empty:
                pastoral.set(row, options.pastoral_previous_column, recent.raw)
        pastoral.set(row, options.pastoral_recent_column, event_date)
        # notes and pastor are replaced even when the log leaves them blank
        pastoral.set(row, options.pastoral_notes_column, item.notes.raw)
        pastoral.set(row, options.pastoral_extra_column, item.extra.raw)
        return self.app.settings.attendance_log.logged_label, remark

    def _write_outcomes(
        self, log_source: Source, rows: list[list[Cell]], outcomes: dict[int, Outcome]
    ) -> None:
        if not outcomes:
            return
        log = self.app.settings.attendance_log
        left = min(log.status_column, log.remarks_column)
        right = max(log.status_column, log.remarks_column)
        top = min(outcomes)
        bottom = max(outcomes)
        grid: list[list[Cell]] = []
        for row_number in range(top, bottom + 1):
            offset = row_number - log.data_start_row
            cells = rows[offset] if offset < len(rows) else []
            region = [cell_at(cells, column) for column in range(left, right + 1)]
            outcome = outcomes.get(row_number)
            if outcome is not None:
                status, remark = outcome
                if status is not None:
                    region[log.status_column - left] = Cell.of(status)
                region[log.remarks_column - left] = Cell.of(remark)
            grid.append(region)
        log_source.write_region(top, left, grid)
