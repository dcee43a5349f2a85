"""
Quarterly attendance aggregation.

Counts are distinct event-days per calendar quarter of the current year:
the same event attended twice on one day, or one Sunday service recorded
by two different tabs, counts once.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Collection, Iterable
from datetime import date

from ..identity.names import strict_key
from .labels import canonical_event_name, event_key
from .models import AttendanceRecord, QuarterlySummary

logger = logging.getLogger(__name__)

GUEST = "Guest"


def quarter_of(day: date) -> int:
    """1 for Jan-Mar, 2 for Apr-Jun, 3 for Jul-Sep, 4 for Oct-Dec."""
    return (day.month - 1) // 3 + 1


class AttendanceAggregator:
    def __init__(self, today: date) -> None:
        self.today = today
        self.year = today.year

    def summarize(
        self,
        records: Iterable[AttendanceRecord],
        directory_keys: Collection[str],
    ) -> list[QuarterlySummary]:
        """
        One summary per person with at least one record in the current year.

        Args:
            records: raw records from every source
            directory_keys: strict keys of everybody in the Directory; people
                outside it are flagged as guests

        Returns:
            Summaries in the order people were first seen.
        """
        grouped: dict[int, list[AttendanceRecord]] = defaultdict(list)
        outside_year = 0
        for record in records:
            if record.event_date.year != self.year:
                outside_year += 1
                continue
            grouped[record.person_id].append(record)
        if outside_year:
            logger.debug("Ignored %d records outside %d", outside_year, self.year)

        summaries: list[QuarterlySummary] = []
        for person_id, person_records in grouped.items():
            quarters: dict[int, set[tuple[str, date]]] = {1: set(), 2: set(), 3: set(), 4: set()}
            for record in person_records:
                quarters[quarter_of(record.event_date)].add(
                    event_key(record.event_name, record.event_date)
                )
            # max() keeps the first of several records on the latest day
            latest = max(person_records, key=lambda r: r.event_date)
            # Policy: strict key, the Directory membership key.
            is_member = strict_key(latest.last_name, latest.first_name) in directory_keys
            summaries.append(
                QuarterlySummary(
                    person_id=person_id,
                    first_name=latest.first_name,
                    last_name=latest.last_name,
                    q1=len(quarters[1]),
                    q2=len(quarters[2]),
                    q3=len(quarters[3]),
                    q4=len(quarters[4]),
                    last_event_date=latest.event_date,
                    last_event_name=canonical_event_name(
                        event_key(latest.event_name, latest.event_date)[0]
                    ),
                    guest_flag="" if is_member else GUEST,
                )
            )
        return summaries
