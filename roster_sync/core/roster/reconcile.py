"""
Roster reconciliation.

Given the authoritative identities (Directory) and optionally the identities
of feeder tabs, work out which rows each target tab is missing and where to
put them. Planning is pure; the caller performs one bulk write per target.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Optional

from ...cells import Cell, blank_row
from ..identity.models import IdentityRecord, RosterSnapshot
from ..identity.names import loose_key
from .models import Placement, ReconcilePlan

logger = logging.getLogger(__name__)


def snapshot_identities(snapshot: RosterSnapshot) -> list[IdentityRecord]:
    """Distinct loose-key identities of a tab, in row order, first spelling kept."""
    seen: dict[str, IdentityRecord] = {}
    for row in snapshot.rows:
        if row.is_blank:
            continue
        key = loose_key(row.last_name, row.first_name)
        if key is None or key in seen:
            continue
        seen[key] = IdentityRecord(key=key, last_name=row.last_name, first_name=row.first_name)
    return list(seen.values())


class RosterReconciler:
    """Plans the rows needed to bring every target in line with the union."""

    def build_union(
        self,
        authoritative: Iterable[IdentityRecord],
        feeders: Iterable[RosterSnapshot] = (),
    ) -> list[IdentityRecord]:
        """
        Union of identities in first-observed order: authoritative first,
        then each feeder in the order given. No re-sorting happens here.
        """
        union: dict[str, IdentityRecord] = {}
        for record in authoritative:
            union.setdefault(record.key, record)
        for snapshot in feeders:
            before = len(union)
            for record in snapshot_identities(snapshot):
                union.setdefault(record.key, record)
            logger.debug(
                "Feeder '%s' contributed %d new identities", snapshot.tab, len(union) - before
            )
        return list(union.values())

    def plan(
        self,
        union: Sequence[IdentityRecord],
        target: RosterSnapshot,
        sequence_column: Optional[int] = None,
    ) -> ReconcilePlan:
        existing: set[str] = set()
        for row in target.rows:
            if row.is_blank:
                continue
            key = loose_key(row.last_name, row.first_name)
            if key is not None:
                existing.add(key)

        plan = ReconcilePlan(tab=target.tab, existing=len(existing))
        missing: list[IdentityRecord] = []
        for record in union:
            if record.key in existing:
                continue
            existing.add(record.key)
            missing.append(record)
        if not missing:
            return plan

        next_sequence = None
        if sequence_column:
            next_sequence = _max_sequence(target, sequence_column)

        gaps = target.blank_rows()
        end_row = max((row.row for row in target.rows), default=target.first_data_row - 1)
        for record in missing:
            if next_sequence is not None:
                next_sequence += 1
            if gaps:
                row_number, reuses_gap = gaps.pop(0), True
            else:
                end_row += 1
                row_number, reuses_gap = end_row, False
            plan.placements.append(
                Placement(
                    row=row_number,
                    record=record,
                    sequence=next_sequence,
                    reuses_gap=reuses_gap,
                )
            )
        return plan


def _max_sequence(target: RosterSnapshot, column: int) -> int:
    highest = 0
    for row in target.rows:
        value = row.cell(column).as_number()
        if value is not None and value > highest:
            highest = int(value)
    return highest


def render_plan(
    plan: ReconcilePlan,
    target: RosterSnapshot,
    *,
    last_name_column: int,
    first_name_column: int,
    sequence_column: Optional[int] = None,
) -> tuple[int, list[list[Cell]]]:
    """
    Turn a plan into one rectangular write: (first row, grid).

    The region spans from the first to the last placement. Rows in between
    that are not placements are written back unchanged from the snapshot;
    a reused gap row keeps its other cells.
    """
    if not plan.placements:
        return target.first_data_row, []
    width = max(
        target.width, last_name_column, first_name_column, sequence_column or 0
    )
    existing = {row.row: row for row in target.rows}
    placed = {placement.row: placement for placement in plan.placements}
    start = min(placed)
    stop = max(placed)

    grid: list[list[Cell]] = []
    for row_number in range(start, stop + 1):
        source_row = existing.get(row_number)
        cells = list(source_row.cells) if source_row else []
        cells.extend(blank_row(width - len(cells)))
        placement = placed.get(row_number)
        if placement is not None:
            cells[last_name_column - 1] = Cell.of(placement.record.last_name)
            cells[first_name_column - 1] = Cell.of(placement.record.first_name)
            if sequence_column and placement.sequence is not None:
                cells[sequence_column - 1] = Cell.of(placement.sequence)
        grid.append(cells)
    return start, grid
