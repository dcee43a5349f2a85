"""
Domain models for attendance aggregation.

These are pure data models with no dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class ActivityTier(Enum):
    CORE = "Core"
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ARCHIVE = "Archive"


@dataclass(frozen=True, slots=True)
class AttendanceRecord:
    """One observed attendance of one person at one dated event."""

    person_id: int
    first_name: str
    last_name: str
    event_name: str
    event_date: date
    is_volunteer: bool = False
    source: str = ""
    """Tab the record was read from"""


@dataclass(frozen=True, slots=True)
class QuarterlySummary:
    """
    Attendance of one person in the current calendar year.

    Quarter counts are distinct event-days, not raw records.
    """
    person_id: int
    first_name: str
    last_name: str
    q1: int
    q2: int
    q3: int
    q4: int
    last_event_date: date
    last_event_name: str
    guest_flag: str = ""

    @property
    def total(self) -> int:
        return self.q1 + self.q2 + self.q3 + self.q4

    @property
    def is_guest(self) -> bool:
        return self.guest_flag == "Guest"


@dataclass(frozen=True, slots=True)
class ActivityStats:
    """Recency/frequency figures the tier is derived from."""

    last_date: Optional[date]
    count90: int
    tier: ActivityTier
