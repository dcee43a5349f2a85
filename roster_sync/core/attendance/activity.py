"""
Activity tiers from recency and 90-day frequency.

Unlike the quarterly summary this works on raw records over a rolling
window: two records on the same day count twice here.
"""

from __future__ import annotations

import calendar
import logging
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from typing import Optional

from ..identity.names import strict_key
from .models import ActivityStats, ActivityTier, AttendanceRecord

logger = logging.getLogger(__name__)


def months_before(day: date, months: int) -> date:
    """Same day of month ``months`` earlier, clamped to the month's last day."""
    index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


class ActivityClassifier:
    def __init__(
        self,
        today: date,
        *,
        window_days: int = 90,
        core_threshold: int = 12,
        active_threshold: int = 3,
        archive_after_months: int = 12,
    ) -> None:
        self.today = today
        self.window_start = today - timedelta(days=window_days)
        self.archive_before = months_before(today, archive_after_months)
        self.core_threshold = core_threshold
        self.active_threshold = active_threshold

    def tier_for(self, last_date: Optional[date], count90: int) -> ActivityTier:
        """First matching rule wins: Archive, Core, Active, Inactive."""
        if last_date is not None and last_date < self.archive_before:
            return ActivityTier.ARCHIVE
        if count90 >= self.core_threshold:
            return ActivityTier.CORE
        if count90 >= self.active_threshold:
            return ActivityTier.ACTIVE
        return ActivityTier.INACTIVE

    def classify(self, records: Iterable[AttendanceRecord]) -> dict[str, ActivityStats]:
        """Stats and tier per strict key for everybody with at least one record."""
        last_dates: dict[str, date] = {}
        counts: dict[str, int] = {}
        for record in records:
            if not record.first_name or not record.last_name:
                continue
            # Policy: strict key, re-derived from the record's display name.
            key = strict_key(record.last_name, record.first_name)
            if not key:
                continue
            current = last_dates.get(key)
            if current is None or record.event_date > current:
                last_dates[key] = record.event_date
            counts[key] = counts.get(key, 0) + (1 if record.event_date >= self.window_start else 0)

        result = {
            key: ActivityStats(
                last_date=last_date,
                count90=counts[key],
                tier=self.tier_for(last_date, counts[key]),
            )
            for key, last_date in last_dates.items()
        }
        logger.debug("Classified %d identities", len(result))
        return result

    def tier_of(self, stats: Mapping[str, ActivityStats], last: str, first: str) -> ActivityTier:
        """Tier for a roster row; people without records are Inactive."""
        found = stats.get(strict_key(last, first))
        if found is None:
            return ActivityTier.INACTIVE
        return found.tier


def tier_map(stats: Mapping[str, ActivityStats]) -> dict[str, ActivityTier]:
    return {key: value.tier for key, value in stats.items()}
