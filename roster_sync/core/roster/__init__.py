from __future__ import annotations

from .models import Placement, ReconcilePlan, ReconcileReport, TargetOutcome
from .reconcile import RosterReconciler, render_plan, snapshot_identities
from .sorting import StatusSorter, UNKNOWN_RANK, rank_for_tier

__all__ = [
    "Placement",
    "ReconcilePlan",
    "ReconcileReport",
    "RosterReconciler",
    "StatusSorter",
    "TargetOutcome",
    "UNKNOWN_RANK",
    "rank_for_tier",
    "render_plan",
    "snapshot_identities",
]
