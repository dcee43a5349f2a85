from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import partial
from typing import TYPE_CHECKING, Optional

from ..cells import blank_row
from ..config import TabSettings
from ..core.attendance import ActivityClassifier, ActivityTier, tier_map
from ..core.identity import RosterRow, RosterSnapshot, strict_key
from ..core.roster import StatusSorter, rank_for_tier
from ..errors import ConfigurationMissing
from ..store import Source
from ..tabs import open_tab, read_roster
from .attendance import gather_attendance

if TYPE_CHECKING:  # pragma: no cover
    from ..app import RosterApp

logger = logging.getLogger(__name__)

GUEST_LABEL = "guest"


class RosterSortService:
    """Re-orders target tabs by guest flag, activity tier and name."""

    def __init__(self, app: RosterApp) -> None:
        self.app = app

    def run(
        self,
        tiers: Optional[Mapping[str, ActivityTier]] = None,
        *,
        directory: Optional[RosterSnapshot] = None,
    ) -> Optional[list[str]]:
        """
        Sort every target tab in place.

        Returns:
            Names of the tabs whose order changed, or None when the pass
            could not run.
        """
        try:
            if tiers is None:
                tiers = self.current_tiers(directory)
            return self._sort_targets(tiers)
        except ConfigurationMissing as exc:
            logger.error("Sorting aborted: %s", exc)
            return None

    def current_tiers(self, directory: Optional[RosterSnapshot] = None) -> dict[str, ActivityTier]:
        if directory is None:
            directory = read_roster(self.app.open_directory(), self.app.settings.directory)
        data = gather_attendance(self.app, directory)
        return tier_map(ActivityClassifier(self.app.today).classify(data.records))

    def _sort_targets(self, tiers: Mapping[str, ActivityTier]) -> list[str]:
        changed: list[str] = []
        for tab in self.app.settings.target_tabs:
            source = open_tab(self.app.store, tab.name, required=tab.required)
            if source is None:
                continue
            if sort_tab(source, tab, tiers):
                changed.append(tab.name)
        return changed


def has_guest_status(row: RosterRow, column: int) -> bool:
    return row.cell(column).text.strip().lower() == GUEST_LABEL


def sort_tab(source: Source, tab: TabSettings, tiers: Mapping[str, ActivityTier]) -> bool:
    """Sort one tab's data rows with a single write; blank rows stay at the bottom."""
    snapshot = read_roster(source, tab)
    named = [row for row in snapshot.rows if not row.is_blank]
    blank = [row for row in snapshot.rows if row.is_blank]

    is_guest = None
    if tab.status_column:
        is_guest = partial(has_guest_status, column=tab.status_column)

    sorter: StatusSorter[RosterRow] = StatusSorter(
        tier_rank=lambda row: rank_for_tier(tiers.get(strict_key(row.last_name, row.first_name))),
        last_name=lambda row: row.last_name,
        first_name=lambda row: row.first_name,
        is_guest=is_guest,
    )
    ordered = sorter.sort(named) + blank
    if [row.row for row in ordered] == [row.row for row in snapshot.rows]:
        logger.debug("%s: already in order", snapshot.tab)
        return False

    width = snapshot.width
    grid = [list(row.cells) + blank_row(width - len(row.cells)) for row in ordered]
    source.write_region(snapshot.first_data_row, 1, grid)
    logger.info("%s: sorted %d rows", snapshot.tab, len(named))
    return True
