from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..identity.models import IdentityRecord


@dataclass(frozen=True, slots=True)
class Placement:
    row: int
    record: IdentityRecord
    sequence: Optional[int] = None
    reuses_gap: bool = False


@dataclass(slots=True)
class ReconcilePlan:
    tab: str
    existing: int
    placements: list[Placement] = field(default_factory=list)

    @property
    def appended(self) -> int:
        return len(self.placements)

    @property
    def gaps_filled(self) -> int:
        return sum(1 for placement in self.placements if placement.reuses_gap)


@dataclass(slots=True)
class TargetOutcome:
    tab: str
    appended: int = 0
    skipped: bool = False
    reason: Optional[str] = None


@dataclass(slots=True)
class ReconcileReport:
    union_size: int
    outcomes: list[TargetOutcome] = field(default_factory=list)

    @property
    def appended(self) -> int:
        return sum(outcome.appended for outcome in self.outcomes)
