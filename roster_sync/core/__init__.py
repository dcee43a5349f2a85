"""
Core domain layer for roster-sync.

This package contains pure business logic with no store access.
All code here should be testable without I/O operations.
"""

from __future__ import annotations

__all__ = []
