from __future__ import annotations


class RosterSyncError(Exception):
    """Base class for errors raised by roster-sync."""


class ConfigurationMissing(RosterSyncError):
    """A reference or tab that a pass cannot run without is absent."""


class SourceNotFound(RosterSyncError):
    """The tabular store has no source matching the requested reference."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"Source '{reference}' not found")
        self.reference = reference


class MalformedRow(RosterSyncError):
    """A single row cannot be interpreted; callers skip it and continue."""

    def __init__(self, row: int, reason: str) -> None:
        super().__init__(f"row {row}: {reason}")
        self.row = row
        self.reason = reason
