"""
Attendance record collection.

Two kinds of source feed the aggregator:

- checkbox grids: one person per row, one dated event per column; every
  ticked cell under a resolvable date becomes a record.
- the attendance log: one row per observation; only pastoral check-ins are
  taken, at most one per person per day.

Every row with a usable name resolves a person ID through the registry, even
when it contributes no record.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ...cells import Cell, cell_at
from ...errors import MalformedRow
from ..identity.models import RosterSnapshot
from ..identity.names import strict_key
from ..identity.registry import IdentityRegistry
from .labels import PASTORAL_CHECK_IN, is_pastoral_check_in
from .models import AttendanceRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GridColumn:
    column: int
    event_date: date
    event_name: str


@dataclass(frozen=True, slots=True)
class GridHeader:
    """Header rows of a checkbox grid, read once."""

    dates: Sequence[Cell]
    event_names: Optional[Sequence[Cell]]
    first_column: int
    event_label: Optional[str] = None
    placeholder_label: str = "Post event name here"
    volunteer: bool = False

    def columns(self) -> list[GridColumn]:
        """Columns that carry a date and, where the grid names events, a real event name."""
        width = len(self.dates)
        if self.event_names is not None:
            width = max(width, len(self.event_names))
        columns: list[GridColumn] = []
        for column in range(self.first_column, width + 1):
            event_date = cell_at(self.dates, column).as_date()
            if event_date is None:
                continue
            if self.event_names is not None:
                name = cell_at(self.event_names, column).text.strip()
                if not name or name == self.placeholder_label:
                    continue
            else:
                name = self.event_label or ""
            columns.append(GridColumn(column=column, event_date=event_date, event_name=name))
        return columns


def collect_grid(
    snapshot: RosterSnapshot, header: GridHeader, registry: IdentityRegistry
) -> list[AttendanceRecord]:
    columns = header.columns()
    records: list[AttendanceRecord] = []
    for row in snapshot.rows:
        if row.is_blank:
            continue
        # Policy: strict key, shared with the registry.
        key = strict_key(row.last_name, row.first_name)
        if not key:
            continue
        person_id = registry.resolve(key)
        for column in columns:
            if not row.cell(column.column).is_checked():
                continue
            records.append(
                AttendanceRecord(
                    person_id=person_id,
                    first_name=row.first_name,
                    last_name=row.last_name,
                    event_name=column.event_name,
                    event_date=column.event_date,
                    is_volunteer=header.volunteer,
                    source=snapshot.tab,
                )
            )
    logger.debug(
        "Grid '%s': %d records from %d event columns", snapshot.tab, len(records), len(columns)
    )
    return records


@dataclass(frozen=True, slots=True)
class LogEntry:
    row: int
    last_name: str
    first_name: str
    event: Cell
    event_date: Cell

    def parsed_date(self) -> date:
        value = self.event_date.as_date()
        if value is None:
            raise MalformedRow(self.row, f"unreadable date {self.event_date.text!r}")
        return value


def collect_pastoral_log(
    entries: Iterable[LogEntry], registry: IdentityRegistry, *, source: str = ""
) -> list[AttendanceRecord]:
    """Pastoral check-ins from the attendance log, one per person per day."""
    seen: set[tuple[int, date]] = set()
    records: list[AttendanceRecord] = []
    duplicates = 0
    for entry in entries:
        if not is_pastoral_check_in(entry.event.text):
            continue
        key = strict_key(entry.last_name, entry.first_name)
        if not key:
            continue
        person_id = registry.resolve(key)
        try:
            event_date = entry.parsed_date()
        except MalformedRow as exc:
            logger.debug("Skipping attendance log %s", exc)
            continue
        if (person_id, event_date) in seen:
            duplicates += 1
            continue
        seen.add((person_id, event_date))
        records.append(
            AttendanceRecord(
                person_id=person_id,
                first_name=entry.first_name,
                last_name=entry.last_name,
                event_name=PASTORAL_CHECK_IN,
                event_date=event_date,
                source=source,
            )
        )
    if duplicates:
        logger.debug("Attendance log: collapsed %d same-day pastoral check-ins", duplicates)
    return records
