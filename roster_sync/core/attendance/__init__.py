"""
Attendance domain logic.

This module handles:
- Collecting attendance records from checkbox grids and the attendance log
- Quarterly aggregation over distinct event-days
- Activity tiers over a rolling 90-day window

All logic is pure business logic with no store dependencies.
"""

from __future__ import annotations

from .activity import ActivityClassifier, months_before, tier_map
from .aggregate import AttendanceAggregator, quarter_of
from .collect import GridColumn, GridHeader, LogEntry, collect_grid, collect_pastoral_log
from .labels import (
    PASTORAL_CHECK_IN,
    SUNDAY_SERVICE,
    canonical_event_name,
    event_key,
    is_pastoral_check_in,
    is_sunday_service,
)
from .models import ActivityStats, ActivityTier, AttendanceRecord, QuarterlySummary

__all__ = [
    "ActivityClassifier",
    "ActivityStats",
    "ActivityTier",
    "AttendanceAggregator",
    "AttendanceRecord",
    "GridColumn",
    "GridHeader",
    "LogEntry",
    "PASTORAL_CHECK_IN",
    "QuarterlySummary",
    "SUNDAY_SERVICE",
    "canonical_event_name",
    "collect_grid",
    "collect_pastoral_log",
    "event_key",
    "is_pastoral_check_in",
    "is_sunday_service",
    "months_before",
    "quarter_of",
    "tier_map",
]
