from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..core.identity import RosterSnapshot
from ..core.roster import snapshot_identities
from ..errors import ConfigurationMissing
from ..tabs import open_tab, read_roster

if TYPE_CHECKING:  # pragma: no cover
    from ..app import RosterApp

logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 30


@dataclass(slots=True)
class TabCount:
    tab: str
    rows: int
    named_rows: int
    unique_names: int
    not_in_directory: list[str] = field(default_factory=list)


@dataclass(slots=True)
class CountsReport:
    tabs: list[TabCount] = field(default_factory=list)
    directory_available: bool = True


def count_names(snapshot: RosterSnapshot) -> TabCount:
    return TabCount(
        tab=snapshot.tab,
        rows=len(snapshot.rows),
        named_rows=sum(1 for row in snapshot.rows if not row.is_blank),
        unique_names=len(snapshot_identities(snapshot)),
    )


class NameCountService:
    """Diagnostic: how many names each tab holds and which ones the Directory lacks."""

    def __init__(self, app: RosterApp) -> None:
        self.app = app

    def run(self) -> CountsReport:
        settings = self.app.settings
        report = CountsReport()

        directory_keys: Optional[set[str]] = None
        try:
            directory = read_roster(self.app.open_directory(), settings.directory)
        except ConfigurationMissing as exc:
            logger.warning("Directory unavailable, skipping comparison: %s", exc)
            report.directory_available = False
        else:
            report.tabs.append(count_names(directory))
            directory_keys = {record.key for record in snapshot_identities(directory)}

        for tab in settings.tabs:
            source = open_tab(self.app.store, tab.name)
            if source is None:
                continue
            snapshot = read_roster(source, tab)
            count = count_names(snapshot)
            if tab.target and directory_keys is not None:
                count.not_in_directory = [
                    f"{record.last_name}, {record.first_name}"
                    for record in snapshot_identities(snapshot)
                    if record.key not in directory_keys
                ]
            report.tabs.append(count)

        for count in report.tabs:
            logger.info(
                "%s: rows=%d, named=%d, unique=%d",
                count.tab,
                count.rows,
                count.named_rows,
                count.unique_names,
            )
            if count.not_in_directory:
                preview = count.not_in_directory[:PREVIEW_LIMIT]
                logger.info(
                    "%s: %d names not in Directory (first %d: %s)",
                    count.tab,
                    len(count.not_in_directory),
                    len(preview),
                    " | ".join(preview),
                )
        return report
