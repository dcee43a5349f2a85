"""
Domain models for identities and roster rows.

These are pure data models with no store dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ...cells import Cell, cell_at


@dataclass(frozen=True, slots=True)
class IdentityRecord:
    """
    One person as first observed in some source.

    Example:
        IdentityRecord(key="smith|john", last_name="Smith", first_name="John")
    """
    key: str
    """Identity key under the policy of the producer (loose or strict)"""

    last_name: str
    first_name: str


@dataclass(frozen=True, slots=True)
class RosterRow:
    """A data row of a roster tab, read once per run."""

    row: int
    """1-based row number in the source"""

    last_name: str
    """Trimmed text of the last-name cell"""

    first_name: str
    """Trimmed text of the first-name cell"""

    person_id: Optional[int] = None
    """Explicit person ID carried by the row, if any"""

    cells: tuple[Cell, ...] = ()
    """Every cell of the row, full width"""

    @property
    def is_blank(self) -> bool:
        return not self.last_name and not self.first_name

    def cell(self, column: Optional[int]) -> Cell:
        return cell_at(self.cells, column)


@dataclass(slots=True)
class RosterSnapshot:
    """All data rows of one tab, as read at the start of a pass."""

    tab: str
    first_data_row: int
    width: int
    rows: list[RosterRow] = field(default_factory=list)

    def blank_rows(self) -> list[int]:
        return [row.row for row in self.rows if row.is_blank]
