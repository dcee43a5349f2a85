from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from ..cells import blank_row, to_cells
from ..core.attendance import (
    ActivityClassifier,
    ActivityTier,
    AttendanceAggregator,
    QuarterlySummary,
    tier_map,
)
from ..core.identity import display_name
from ..core.roster import StatusSorter, rank_for_tier
from ..errors import ConfigurationMissing
from ..tabs import open_tab, read_roster
from .attendance import gather_attendance

if TYPE_CHECKING:  # pragma: no cover
    from ..app import RosterApp

logger = logging.getLogger(__name__)

STATS_COLUMNS = (
    "BEL Code",
    "Full Name",
    "Last Name",
    "First Name",
    "Guest",
    "Status",
    "Q1",
    "Q2",
    "Q3",
    "Q4",
    "Total",
    "Last Event Date",
    "Last Event",
)


@dataclass(slots=True)
class StatsReport:
    rows: int
    guests: int = 0
    new_ids: list[int] = field(default_factory=list)
    tiers: Counter = field(default_factory=Counter)
    tier_by_key: dict[str, ActivityTier] = field(default_factory=dict)


def stats_row(summary: QuarterlySummary, tier: ActivityTier) -> list[Any]:
    return [
        summary.person_id,
        display_name(summary.last_name, summary.first_name),
        summary.last_name,
        summary.first_name,
        summary.guest_flag,
        tier.value,
        summary.q1,
        summary.q2,
        summary.q3,
        summary.q4,
        summary.total,
        summary.last_event_date,
        summary.last_event_name,
    ]


class AttendanceStatsService:
    """Rewrites the Attendance Stats tab from every attendance source."""

    def __init__(self, app: RosterApp) -> None:
        self.app = app

    def run(self) -> Optional[StatsReport]:
        try:
            return self._run()
        except ConfigurationMissing as exc:
            logger.error("Attendance stats aborted: %s", exc)
            return None

    def _run(self) -> StatsReport:
        settings = self.app.settings
        directory = read_roster(self.app.open_directory(), settings.directory)
        data = gather_attendance(self.app, directory)
        summaries = AttendanceAggregator(self.app.today).summarize(
            data.records, data.directory_keys
        )
        classifier = ActivityClassifier(self.app.today)
        activity = classifier.classify(data.records)
        report = StatsReport(
            rows=len(summaries),
            new_ids=list(data.registry.generated),
            tier_by_key=tier_map(activity),
        )
        if not summaries:
            logger.info("No attendance recorded in %d; stats left unchanged", self.app.today.year)
            return report

        tiers = {
            summary.person_id: classifier.tier_of(
                activity, summary.last_name, summary.first_name
            )
            for summary in summaries
        }
        sorter: StatusSorter[QuarterlySummary] = StatusSorter(
            tier_rank=lambda summary: rank_for_tier(tiers[summary.person_id]),
            last_name=lambda summary: summary.last_name,
            first_name=lambda summary: summary.first_name,
            is_guest=lambda summary: summary.is_guest,
        )
        ordered = sorter.sort(summaries)

        source = open_tab(self.app.store, settings.stats.name, required=True)
        start = settings.stats.data_start_row
        width = len(STATS_COLUMNS)
        grid = [to_cells(stats_row(summary, tiers[summary.person_id])) for summary in ordered]
        # rows left over from a longer previous run are cleared in the same write
        stale = source.last_data_row() - start + 1 - len(grid)
        grid.extend(blank_row(width) for _ in range(max(stale, 0)))
        source.write_region(start, 1, grid)

        for summary in ordered:
            report.tiers[tiers[summary.person_id].value] += 1
            if summary.is_guest:
                report.guests += 1
        logger.info(
            "Attendance Stats: %d people (%d guests), %s",
            report.rows,
            report.guests,
            ", ".join(f"{tier}={count}" for tier, count in sorted(report.tiers.items())),
        )
        return report
