from __future__ import annotations

from .attendance import AttendanceData, gather_attendance
from .counts import NameCountService
from .export_log import ExportLogService
from .guests import GuestService
from .log_import import ImportReport, LogImportService
from .member_status import MemberStatusService
from .names import NameSyncService
from .sorting import RosterSortService
from .stats import AttendanceStatsService

__all__ = [
    "AttendanceData",
    "AttendanceStatsService",
    "ExportLogService",
    "GuestService",
    "ImportReport",
    "LogImportService",
    "MemberStatusService",
    "NameCountService",
    "NameSyncService",
    "RosterSortService",
    "gather_attendance",
]
