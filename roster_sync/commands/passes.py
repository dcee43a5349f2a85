"""Console summaries for the workbook passes; each returns False when the pass aborted."""

from __future__ import annotations

from ..app import RosterApp
from ..services import (
    AttendanceStatsService,
    ExportLogService,
    GuestService,
    LogImportService,
    MemberStatusService,
    NameSyncService,
)
from .output import Status, emit


def sync_names(app: RosterApp, *, union: bool = True) -> bool:
    report = NameSyncService(app).run(union=union)
    if report is None:
        emit("Sync names", Status.FAILED, "see log")
        return False
    emit("Sync names", detail=f"{report.union_size} names known")
    for outcome in report.outcomes:
        if outcome.skipped:
            emit(f"  {outcome.tab}", Status.SKIPPED, outcome.reason)
        else:
            emit(f"  {outcome.tab}", detail=f"{outcome.appended} added")
    return True


def member_status(app: RosterApp) -> bool:
    counts = MemberStatusService(app).run()
    if counts is None:
        emit("Member status", Status.FAILED, "see log")
        return False
    emit("Member status")
    for count in counts:
        emit(f"  {count.tab}", detail=f"{count.members} members, {count.guests} guests")
    return True


def stats(app: RosterApp) -> bool:
    report = AttendanceStatsService(app).run()
    if report is None:
        emit("Attendance stats", Status.FAILED, "see log")
        return False
    tiers = ", ".join(f"{tier}={count}" for tier, count in sorted(report.tiers.items()))
    detail = f"{report.rows} people, {report.guests} guests"
    if tiers:
        detail = f"{detail}; {tiers}"
    emit("Attendance stats", detail=detail)
    if report.new_ids:
        emit("  New BEL codes", detail=", ".join(str(value) for value in report.new_ids))
    return True


def guests(app: RosterApp, *, append: bool = False, fill_dates: bool = False) -> bool:
    service = GuestService(app)
    if fill_dates:
        report = service.fill_dates()
    elif append:
        report = service.add_new()
    else:
        report = service.refresh()
    if report is None:
        emit("Guests", Status.FAILED, "see log")
        return False
    emit("Guests", detail=f"{report.mode}: {report.guests} guests, {report.written} written")
    return True


def export_log(app: RosterApp) -> bool:
    report = ExportLogService(app).run()
    if report is None:
        emit("Export to log", Status.FAILED, "see log")
        return False
    emit("Export to log", detail=f"{report.added} new rows, {report.existing} already logged")
    return True


def import_log(app: RosterApp) -> bool:
    report = LogImportService(app).run()
    if report is None:
        emit("Import log", Status.FAILED, "see log")
        return False
    emit(
        "Import log",
        detail=f"{report.logged} of {report.pending} rows logged, "
        f"{report.new_people} people and {report.new_columns} event columns added",
    )
    if report.duplicates:
        emit("  Duplicates", detail=str(report.duplicates))
    if report.unresolved:
        emit("  Not logged", Status.WARNING, f"{report.unresolved} rows, see the Remarks column")
    return True


def run_all(app: RosterApp) -> bool:
    """member-status, sync-names, stats, guests; later passes still run after a failure."""
    results = [
        member_status(app),
        sync_names(app),
        stats(app),
        guests(app),
    ]
    return all(results)
