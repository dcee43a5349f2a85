"""
Identity domain logic.

This module handles:
- Name key policies (strict, loose, fallback)
- Person ID assignment
- Roster row models shared by the reconciliation and attendance passes

All logic is pure business logic with no store dependencies.
"""

from __future__ import annotations

from .models import IdentityRecord, RosterRow, RosterSnapshot
from .names import (
    capitalize_name,
    display_name,
    fallback_key,
    loose_key,
    split_full_name,
    strict_key,
)
from .registry import IdentityRegistry

__all__ = [
    "IdentityRecord",
    "IdentityRegistry",
    "RosterRow",
    "RosterSnapshot",
    "capitalize_name",
    "display_name",
    "fallback_key",
    "loose_key",
    "split_full_name",
    "strict_key",
]
