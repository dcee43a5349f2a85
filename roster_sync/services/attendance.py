from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..core.attendance import (
    AttendanceRecord,
    collect_grid,
    collect_pastoral_log,
)
from ..core.identity import IdentityRegistry, RosterSnapshot
from ..store import Source
from ..tabs import membership_keys, open_tab, read_grid_header, read_log_entries, read_roster

if TYPE_CHECKING:  # pragma: no cover
    from ..app import RosterApp

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AttendanceData:
    registry: IdentityRegistry
    records: list[AttendanceRecord] = field(default_factory=list)
    directory_keys: set[str] = field(default_factory=set)


def gather_attendance(app: RosterApp, directory: RosterSnapshot) -> AttendanceData:
    """
    Seed the registry (Directory first, then ``registry_order``) and collect
    every attendance record from the grid tabs and the attendance log.
    """
    settings = app.settings
    registry = IdentityRegistry()
    explicit = registry.scan(directory.rows)
    logger.debug("Directory: %d explicit person IDs", explicit)

    opened: dict[str, tuple[Source, RosterSnapshot]] = {}
    for name in settings.registry_order:
        tab = settings.tab(name)
        source = open_tab(app.store, tab.name, required=tab.required)
        if source is None:
            continue
        snapshot = read_roster(source, tab)
        explicit = registry.scan(snapshot.rows)
        logger.debug("%s: %d explicit person IDs", tab.name, explicit)
        opened[tab.name] = (source, snapshot)

    data = AttendanceData(registry=registry, directory_keys=membership_keys(directory))
    for tab in settings.grid_tabs:
        if tab.name in opened:
            source, snapshot = opened[tab.name]
        else:
            source = open_tab(app.store, tab.name, required=tab.required)
            if source is None:
                continue
            snapshot = read_roster(source, tab)
        data.records.extend(collect_grid(snapshot, read_grid_header(source, tab), registry))

    log_settings = settings.attendance_log
    log_source = open_tab(app.store, log_settings.name)
    if log_source is not None:
        entries = read_log_entries(log_source, log_settings)
        data.records.extend(collect_pastoral_log(entries, registry, source=log_source.name))

    if registry.generated:
        logger.info("Assigned %d new person IDs", len(registry.generated))
    return data
