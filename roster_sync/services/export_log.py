from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Optional

from ..cells import Cell, cell_at, to_cells
from ..core.identity import display_name
from ..errors import ConfigurationMissing
from ..store import read_all
from ..tabs import open_tab, read_grid_header, read_roster

if TYPE_CHECKING:  # pragma: no cover
    from ..app import RosterApp

logger = logging.getLogger(__name__)

LogKey = tuple[str, str, str, str]


@dataclass(slots=True)
class ExportReport:
    existing: int
    added: int = 0


def log_key(last: str, first: str, event: str, day: Cell | date) -> Optional[LogKey]:
    """(last, first, event, day) lowercased; None when any part is missing."""
    if isinstance(day, Cell):
        parsed = day.as_date()
        day_text = parsed.isoformat() if parsed else day.text.strip()
    else:
        day_text = day.isoformat()
    parts = (last.strip().lower(), first.strip().lower(), event.strip().lower(), day_text)
    if not all(parts):
        return None
    return parts


def new_entry_id() -> str:
    """Eight hex characters, the format of hand-entered log IDs."""
    return secrets.token_hex(4)


class ExportLogService:
    """Copies every ticked grid cell into the attendance log, once."""

    def __init__(self, app: RosterApp) -> None:
        self.app = app

    def run(self, *, now: Optional[datetime] = None) -> Optional[ExportReport]:
        try:
            return self._run(now or datetime.now())
        except ConfigurationMissing as exc:
            logger.error("Attendance log export aborted: %s", exc)
            return None

    def _run(self, now: datetime) -> ExportReport:
        settings = self.app.settings
        log = settings.attendance_log
        log_source = open_tab(self.app.store, log.name, required=True)

        seen: set[LogKey] = set()
        existing_rows = read_all(log_source, log.data_start_row)
        for cells in existing_rows:
            key = log_key(
                cell_at(cells, log.last_name_column).text,
                cell_at(cells, log.first_name_column).text,
                cell_at(cells, log.event_column).text,
                cell_at(cells, log.date_column),
            )
            if key is not None:
                seen.add(key)
        report = ExportReport(existing=len(seen))

        width = max(
            log.id_column,
            log.full_name_column,
            log.last_name_column,
            log.first_name_column,
            log.type_column,
            log.event_column,
            log.date_column,
            log.timestamp_column,
            log.status_column,
        )
        new_rows: list[list[Cell]] = []
        for tab in settings.grid_tabs:
            source = open_tab(self.app.store, tab.name, required=tab.required)
            if source is None:
                continue
            snapshot = read_roster(source, tab)
            columns = read_grid_header(source, tab).columns()
            for row in snapshot.rows:
                if row.is_blank:
                    continue
                for column in columns:
                    if not row.cell(column.column).is_checked():
                        continue
                    key = log_key(row.last_name, row.first_name, column.event_name, column.event_date)
                    if key is None or key in seen:
                        continue
                    seen.add(key)
                    values: list[Any] = [None] * width
                    values[log.id_column - 1] = new_entry_id()
                    values[log.full_name_column - 1] = display_name(row.last_name, row.first_name)
                    values[log.last_name_column - 1] = row.last_name
                    values[log.first_name_column - 1] = row.first_name
                    values[log.event_column - 1] = column.event_name
                    values[log.date_column - 1] = column.event_date
                    values[log.timestamp_column - 1] = now
                    values[log.status_column - 1] = log.logged_label
                    new_rows.append(to_cells(values))

        if new_rows:
            start = max(log_source.last_data_row() + 1, log.data_start_row)
            log_source.write_region(start, 1, new_rows)
        report.added = len(new_rows)
        logger.info("Attendance Log: %d new rows (%d already logged)", report.added, report.existing)
        return report

