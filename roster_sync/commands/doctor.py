from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..app import RosterApp
from ..config import Settings
from ..errors import ConfigurationMissing
from ..store import match_tab_name
from ..tabs import read_grid_header, read_roster
from .output import CheckLine, Status


@dataclass(slots=True)
class DoctorReport:
    lines: list[CheckLine] = field(default_factory=list)

    def add(self, label: str, status: Status = Status.OK, detail: Optional[str] = None) -> None:
        self.lines.append(CheckLine(label, status, detail))

    @property
    def ok(self) -> bool:
        return not any(line.status.is_problem for line in self.lines)

    @property
    def checks(self) -> list[str]:
        return [str(line) for line in self.lines]


def run(settings: Settings, *, app: Optional[RosterApp] = None) -> DoctorReport:
    report = DoctorReport()

    owns_app = app is None
    if app is None:
        if not settings.workbook.exists():
            report.add("Workbook", Status.ERROR, f"missing: {settings.workbook}")
            return report
        app = RosterApp.create(settings)
    report.add("Workbook", detail=str(settings.workbook))

    try:
        names = app.store.source_names()

        try:
            directory = read_roster(app.open_directory(), settings.directory)
            named = sum(1 for row in directory.rows if not row.is_blank)
            report.add("Directory", detail=f"{named} names")
        except ConfigurationMissing as exc:
            report.add("Directory", Status.ERROR, str(exc))

        for tab in settings.tabs:
            found = match_tab_name(names, tab.name)
            if found is None:
                if tab.required:
                    report.add(tab.name, Status.ERROR, "required tab missing")
                else:
                    report.add(tab.name, Status.WARNING, "tab missing; passes will skip it")
                continue
            if tab.grid is None:
                report.add(tab.name)
                continue
            columns = read_grid_header(app.store.open_source(found), tab).columns()
            if columns:
                report.add(tab.name, detail=f"{len(columns)} dated event columns")
            else:
                report.add(tab.name, Status.WARNING, "no dated event columns")

        for label, name in (
            ("Attendance Log", settings.attendance_log.name),
            ("Attendance Stats", settings.stats.name),
            ("Guests", settings.guests.name),
        ):
            if match_tab_name(names, name) is None:
                report.add(label, Status.WARNING, f"tab '{name}' missing")
            else:
                report.add(label)

        if settings.registry_order:
            report.add("Registry order", detail=" > ".join(["Directory", *settings.registry_order]))
        else:
            report.add("Registry order", Status.SKIPPED, "only the Directory carries BEL codes")
    finally:
        if owns_app:
            app.close()

    return report
