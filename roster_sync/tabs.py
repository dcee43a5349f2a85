"""
Reading tabs through their declarative descriptors.

Every pass reads roster tabs the same way: the descriptor names the header
offset and the name/ID columns, and this module turns the store's cells into
``RosterSnapshot``s once per pass.
"""

from __future__ import annotations

import logging
from typing import Optional

from .cells import cell_at
from .config import AttendanceLogSettings, TabSettings
from .core.attendance.collect import GridHeader, LogEntry
from .core.identity.models import RosterRow, RosterSnapshot
from .core.identity.names import strict_key
from .errors import ConfigurationMissing, SourceNotFound
from .store import Source, TabularStore, read_all

logger = logging.getLogger(__name__)


def open_tab(store: TabularStore, name: str, *, required: bool = False) -> Optional[Source]:
    """
    Open a tab by (loose) name.

    A missing required tab raises ``ConfigurationMissing``; a missing optional
    one is logged and ``None`` is returned so the caller can skip it.
    """
    try:
        return store.open_source(name)
    except SourceNotFound as exc:
        if required:
            raise ConfigurationMissing(f"Required tab '{name}' not found") from exc
        logger.warning("Tab '%s' not found. Skipping.", name)
        return None


def read_roster(source: Source, tab: TabSettings) -> RosterSnapshot:
    rows = read_all(source, tab.data_start_row)
    snapshot = RosterSnapshot(
        tab=source.name,
        first_data_row=tab.data_start_row,
        width=source.last_data_column(),
    )
    for offset, cells in enumerate(rows):
        person_id = None
        if tab.id_column:
            person_id = cell_at(cells, tab.id_column).as_person_id()
        snapshot.rows.append(
            RosterRow(
                row=tab.data_start_row + offset,
                last_name=cell_at(cells, tab.last_name_column).text.strip(),
                first_name=cell_at(cells, tab.first_name_column).text.strip(),
                person_id=person_id,
                cells=tuple(cells),
            )
        )
    return snapshot


def read_grid_header(source: Source, tab: TabSettings) -> GridHeader:
    grid = tab.grid
    if grid is None:
        raise ValueError(f"Tab '{tab.name}' has no grid layout")
    width = source.last_data_column()
    dates = source.read_region(grid.date_row, 1, 1, width)[0] if width else []
    event_names = None
    if grid.event_name_row:
        event_names = source.read_region(grid.event_name_row, 1, 1, width)[0] if width else []
    return GridHeader(
        dates=dates,
        event_names=event_names,
        first_column=grid.first_column,
        event_label=grid.event_label,
        placeholder_label=grid.placeholder_label,
        volunteer=grid.volunteer,
    )


def read_log_entries(source: Source, log: AttendanceLogSettings) -> list[LogEntry]:
    entries: list[LogEntry] = []
    for offset, cells in enumerate(read_all(source, log.data_start_row)):
        entries.append(
            LogEntry(
                row=log.data_start_row + offset,
                last_name=cell_at(cells, log.last_name_column).text.strip(),
                first_name=cell_at(cells, log.first_name_column).text.strip(),
                event=cell_at(cells, log.event_column),
                event_date=cell_at(cells, log.date_column),
            )
        )
    return entries


def membership_keys(directory: RosterSnapshot) -> set[str]:
    """Strict keys of Directory rows that carry both a last and a first name."""
    keys: set[str] = set()
    for row in directory.rows:
        if row.last_name and row.first_name:
            # Policy: strict key, Directory membership.
            key = strict_key(row.last_name, row.first_name)
            if key:
                keys.add(key)
    return keys
