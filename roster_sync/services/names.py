from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from ..config import TabSettings
from ..core.identity import RosterSnapshot
from ..core.roster import (
    ReconcileReport,
    RosterReconciler,
    TargetOutcome,
    render_plan,
    snapshot_identities,
)
from ..errors import ConfigurationMissing
from ..store import Source
from ..tabs import open_tab, read_roster
from .sorting import RosterSortService

if TYPE_CHECKING:  # pragma: no cover
    from ..app import RosterApp

logger = logging.getLogger(__name__)


class NameSyncService:
    """Brings every target tab in line with the Directory (and the feeder tabs)."""

    def __init__(self, app: RosterApp) -> None:
        self.app = app
        self.reconciler = RosterReconciler()

    def run(self, *, union: bool = True, sort: bool = True) -> Optional[ReconcileReport]:
        """
        Append missing names to every target tab, then re-sort the targets.

        Args:
            union: also take names from the feeder tabs, not only the Directory
            sort: re-sort target tabs by tier and name afterwards
        """
        try:
            return self._run(union=union, sort=sort)
        except ConfigurationMissing as exc:
            logger.error("Name sync aborted: %s", exc)
            return None

    def _run(self, *, union: bool, sort: bool) -> ReconcileReport:
        settings = self.app.settings
        directory = read_roster(self.app.open_directory(), settings.directory)
        authoritative = snapshot_identities(directory)
        logger.info("Directory: %d names", len(authoritative))

        skipped: list[TargetOutcome] = []
        opened: list[tuple[TabSettings, Source, RosterSnapshot]] = []
        for tab in settings.tabs:
            if not tab.target and not (union and tab.feeder):
                continue
            source = open_tab(self.app.store, tab.name, required=tab.required)
            if source is None:
                if tab.target:
                    skipped.append(TargetOutcome(tab.name, skipped=True, reason="tab not found"))
                continue
            opened.append((tab, source, read_roster(source, tab)))

        feeders = [snapshot for tab, _source, snapshot in opened if union and tab.feeder]
        union_records = self.reconciler.build_union(authoritative, feeders)
        report = ReconcileReport(union_size=len(union_records), outcomes=skipped)

        for tab, source, snapshot in opened:
            if not tab.target:
                continue
            plan = self.reconciler.plan(union_records, snapshot, tab.sequence_column)
            if plan.placements:
                start, grid = render_plan(
                    plan,
                    snapshot,
                    last_name_column=tab.last_name_column,
                    first_name_column=tab.first_name_column,
                    sequence_column=tab.sequence_column,
                )
                source.write_region(start, 1, grid)
                logger.info(
                    "%s: added %d names (%d into blank rows)",
                    tab.name,
                    plan.appended,
                    plan.gaps_filled,
                )
            else:
                logger.info("%s: no missing names", tab.name)
            report.outcomes.append(TargetOutcome(tab.name, appended=plan.appended))

        if sort:
            RosterSortService(self.app).run(directory=directory)
        return report
