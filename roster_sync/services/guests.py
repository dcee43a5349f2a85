"""
Guests tab maintenance.

A guest is a roster row marked "Guest" in the service or event grid with at
least one ticked attendance box. For each guest the tab shows three dates:
first Sunday service, first intro (the intro event, else the earliest
pastoral check-in in the attendance log) and Directory registration.

Three modes:
- refresh: rewrite the whole tab, sorted by last then first name
- add_new: only place guests the tab does not list yet
- fill_dates: fill blank date cells of the guests already listed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, Optional

from ..cells import Cell, CellKind, blank_row, cell_at, to_cells
from ..config import TabSettings
from ..core.attendance import GridHeader, is_pastoral_check_in
from ..core.identity import RosterSnapshot, display_name, fallback_key
from ..errors import ConfigurationMissing, MalformedRow
from ..store import Source, read_all
from ..tabs import open_tab, read_grid_header, read_log_entries, read_roster

if TYPE_CHECKING:  # pragma: no cover
    from ..app import RosterApp

logger = logging.getLogger(__name__)

GUEST_STATUS = "guest"
GUEST_WIDTH = 6


def guest_key(last: str, first: str) -> Optional[str]:
    """``last,first`` lowercased; a row with a single name falls back to that name."""
    last = (last or "").strip()
    first = (first or "").strip()
    if last and first:
        return f"{last},{first}".lower()
    # Policy: fallback key, single-name guest rows.
    return fallback_key(last, first)


@dataclass(slots=True)
class Guest:
    last_name: str
    first_name: str
    first_service: Optional[date] = None
    intro: Optional[date] = None
    registered: Optional[date] = None

    def values(self) -> list[Any]:
        return [
            display_name(self.last_name, self.first_name),
            self.last_name,
            self.first_name,
            self.first_service,
            self.intro,
            self.registered,
        ]


@dataclass(slots=True)
class GuestDates:
    """Earliest known dates per guest key, from every source."""

    service: dict[str, date]
    intro: dict[str, date]
    pastoral: dict[str, date]
    registration: dict[str, date]

    def apply(self, key: str, guest: Guest) -> None:
        guest.first_service = self.service.get(key)
        guest.intro = self.intro.get(key) or self.pastoral.get(key)
        guest.registered = self.registration.get(key)


@dataclass(slots=True)
class GuestReport:
    mode: str
    guests: int
    written: int = 0


def _first_checked(row_cells, header: GridHeader, intro_event: Optional[str] = None) -> Optional[date]:
    """Date of the first ticked column, in column order, optionally limited to one event."""
    for column in header.columns():
        if intro_event is not None and intro_event not in column.event_name.lower():
            continue
        if cell_at(row_cells, column.column).is_checked():
            return column.event_date
    return None


class GuestService:
    def __init__(self, app: RosterApp) -> None:
        self.app = app

    def refresh(self) -> Optional[GuestReport]:
        return self._guarded("refresh", self._refresh)

    def add_new(self) -> Optional[GuestReport]:
        return self._guarded("add_new", self._add_new)

    def fill_dates(self) -> Optional[GuestReport]:
        return self._guarded("fill_dates", self._fill_dates)

    def _guarded(self, mode, action) -> Optional[GuestReport]:
        try:
            return action()
        except ConfigurationMissing as exc:
            logger.error("Guests %s aborted: %s", mode, exc)
            return None

    # --- collection -------------------------------------------------------

    def _grid(self, name: str) -> tuple[TabSettings, RosterSnapshot, GridHeader]:
        tab = self.app.settings.tab(name)
        if tab is None or tab.grid is None or not tab.status_column:
            raise ConfigurationMissing(f"Tab '{name}' needs a grid and a status column")
        source = open_tab(self.app.store, tab.name, required=True)
        return tab, read_roster(source, tab), read_grid_header(source, tab)

    def collect(self) -> tuple[dict[str, Guest], GuestDates]:
        """Every guest with attendance, in first-seen order, plus the date maps."""
        settings = self.app.settings
        service_tab, service, service_header = self._grid(settings.guests.service_tab)
        event_tab, event, event_header = self._grid(settings.guests.event_tab)
        directory = read_roster(self.app.open_directory(), settings.directory)
        intro_event = settings.guests.intro_event.lower()

        guests: dict[str, Guest] = {}
        dates = GuestDates(service={}, intro={}, pastoral={}, registration={})
        for tab, snapshot, header, is_service in (
            (service_tab, service, service_header, True),
            (event_tab, event, event_header, False),
        ):
            for row in snapshot.rows:
                if row.cell(tab.status_column).text.strip().lower() != GUEST_STATUS:
                    continue
                key = guest_key(row.last_name, row.first_name)
                if key is None:
                    continue
                attended = any(
                    cell.is_checked() for cell in row.cells[tab.grid.first_column - 1 :]
                )
                if not attended:
                    continue
                guests.setdefault(key, Guest(last_name=row.last_name, first_name=row.first_name))
                if is_service:
                    found = _first_checked(row.cells, header)
                    if found and key not in dates.service:
                        dates.service[key] = found
                else:
                    found = _first_checked(row.cells, header, intro_event)
                    if found and key not in dates.intro:
                        dates.intro[key] = found

        dates.pastoral = self._pastoral_dates()

        column = settings.directory.registration_date_column
        if column:
            for row in directory.rows:
                key = guest_key(row.last_name, row.first_name)
                registered = row.cell(column)
                if key and registered.kind is CellKind.DATE and key not in dates.registration:
                    dates.registration[key] = registered.as_date()

        for key, guest in guests.items():
            dates.apply(key, guest)
        logger.debug("Collected %d guests with attendance", len(guests))
        return guests, dates

    def _pastoral_dates(self) -> dict[str, date]:
        log = self.app.settings.attendance_log
        source = open_tab(self.app.store, log.name)
        if source is None:
            return {}
        earliest: dict[str, date] = {}
        for entry in read_log_entries(source, log):
            if not is_pastoral_check_in(entry.event.text):
                continue
            key = guest_key(entry.last_name, entry.first_name)
            if key is None:
                continue
            try:
                day = entry.parsed_date()
            except MalformedRow as exc:
                logger.debug("Skipping attendance log %s", exc)
                continue
            if key not in earliest or day < earliest[key]:
                earliest[key] = day
        return earliest

    # --- modes --------------------------------------------------------------

    def _guests_tab(self) -> tuple[Source, int, int]:
        settings = self.app.settings.guests
        source = open_tab(self.app.store, settings.name, required=True)
        return source, settings.data_start_row, settings.first_column

    def _listed(self, source: Source, start: int, first_column: int) -> list[list[Cell]]:
        """Current B..G block of the Guests tab, padded to full width."""
        rows = read_all(source, start)
        return [
            [cell_at(row, first_column + offset) for offset in range(GUEST_WIDTH)]
            for row in rows
        ]

    def _refresh(self) -> GuestReport:
        guests, _dates = self.collect()
        source, start, first_column = self._guests_tab()
        ordered = sorted(
            guests.values(), key=lambda g: (g.last_name.lower(), g.first_name.lower())
        )
        grid = [to_cells(guest.values()) for guest in ordered]
        stale = source.last_data_row() - start + 1 - len(grid)
        grid.extend(blank_row(GUEST_WIDTH) for _ in range(max(stale, 0)))
        if grid:
            source.write_region(start, first_column, grid)
        logger.info("Guests: wrote %d guests", len(ordered))
        return GuestReport(mode="refresh", guests=len(guests), written=len(ordered))

    def _add_new(self) -> GuestReport:
        guests, _dates = self.collect()
        source, start, first_column = self._guests_tab()
        listed = self._listed(source, start, first_column)

        known: set[str] = set()
        gaps: list[int] = []
        for offset, cells in enumerate(listed):
            key = guest_key(cells[1].text, cells[2].text)
            if key is None:
                gaps.append(start + offset)
            else:
                known.add(key)

        fresh = sorted(
            (guest for key, guest in guests.items() if key not in known),
            key=lambda g: (g.last_name.lower(), g.first_name.lower()),
        )
        if not fresh:
            logger.info("Guests: no new guests")
            return GuestReport(mode="add_new", guests=len(guests))

        placed: dict[int, Guest] = {}
        end_row = start + len(listed) - 1
        for guest in fresh:
            if gaps:
                placed[gaps.pop(0)] = guest
            else:
                end_row += 1
                placed[end_row] = guest

        first_row, last_row = min(placed), max(placed)
        grid: list[list[Cell]] = []
        for row_number in range(first_row, last_row + 1):
            guest = placed.get(row_number)
            if guest is not None:
                grid.append(to_cells(guest.values()))
            elif row_number - start < len(listed):
                grid.append(listed[row_number - start])
            else:
                grid.append(blank_row(GUEST_WIDTH))
        source.write_region(first_row, first_column, grid)
        logger.info("Guests: added %d new guests", len(fresh))
        return GuestReport(mode="add_new", guests=len(guests), written=len(fresh))

    def _fill_dates(self) -> GuestReport:
        _guests, dates = self.collect()
        source, start, first_column = self._guests_tab()
        listed = self._listed(source, start, first_column)

        filled = 0
        grid: list[list[Cell]] = []
        for cells in listed:
            row = list(cells)
            # only rows with both names are matched
            if cells[1].text.strip() and cells[2].text.strip():
                key = guest_key(cells[1].text, cells[2].text)
                blank = Guest(last_name="", first_name="")
                dates.apply(key, blank)
                for index, found in ((3, blank.first_service), (4, blank.intro), (5, blank.registered)):
                    if row[index].is_empty and found is not None:
                        row[index] = Cell.of(found)
                        filled += 1
            grid.append(row[3:])
        if filled:
            source.write_region(start, first_column + 3, grid)
            logger.info("Guests: filled %d blank dates", filled)
        else:
            logger.info("Guests: no blank dates to fill")
        return GuestReport(mode="fill_dates", guests=len(listed), written=filled)
