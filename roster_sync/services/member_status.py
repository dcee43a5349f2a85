from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..cells import Cell, blank_row
from ..core.identity import RosterSnapshot, strict_key
from ..errors import ConfigurationMissing
from ..tabs import open_tab, read_roster

if TYPE_CHECKING:  # pragma: no cover
    from ..app import RosterApp

logger = logging.getLogger(__name__)

MEMBER = "Member"
GUEST = "Guest"


@dataclass(slots=True)
class StatusCount:
    tab: str
    members: int = 0
    guests: int = 0


def directory_details(directory: RosterSnapshot, columns: dict[str, int]) -> dict[str, dict[str, Cell]]:
    """Strict key -> detail cells (gender, lineage, ...) for every named Directory row."""
    details: dict[str, dict[str, Cell]] = {}
    for row in directory.rows:
        if not row.last_name or not row.first_name:
            continue
        key = strict_key(row.last_name, row.first_name)
        if key and key not in details:
            details[key] = {name: row.cell(column) for name, column in columns.items()}
    return details


class MemberStatusService:
    """Marks roster rows Member or Guest and copies Directory details onto members."""

    def __init__(self, app: RosterApp) -> None:
        self.app = app

    def run(self) -> Optional[list[StatusCount]]:
        try:
            return self._run()
        except ConfigurationMissing as exc:
            logger.error("Member status aborted: %s", exc)
            return None

    def _run(self) -> list[StatusCount]:
        settings = self.app.settings
        directory = read_roster(self.app.open_directory(), settings.directory)
        details = directory_details(directory, settings.directory.detail_columns)
        logger.debug("Directory: %d members with details", len(details))

        counts: list[StatusCount] = []
        for tab in settings.status_tabs:
            source = open_tab(self.app.store, tab.name, required=tab.required)
            if source is None:
                continue
            snapshot = read_roster(source, tab)
            if not snapshot.rows:
                continue
            width = max(
                snapshot.width, tab.status_column, *tab.detail_columns.values()
            )
            count = StatusCount(tab=tab.name)
            grid: list[list[Cell]] = []
            for row in snapshot.rows:
                cells = list(row.cells) + blank_row(width - len(row.cells))
                found = None
                if row.last_name and row.first_name:
                    found = details.get(strict_key(row.last_name, row.first_name))
                if found is None:
                    cells[tab.status_column - 1] = Cell.of(GUEST)
                    count.guests += 1
                else:
                    for name, column in tab.detail_columns.items():
                        if name in found:
                            cells[column - 1] = found[name]
                    cells[tab.status_column - 1] = Cell.of(MEMBER)
                    count.members += 1
                grid.append(cells)
            source.write_region(snapshot.first_data_row, 1, grid)
            logger.info("%s: %d members, %d guests", tab.name, count.members, count.guests)
            counts.append(count)
        return counts
