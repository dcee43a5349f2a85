"""Status lines printed by the doctor and the workbook passes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Status(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"

    @property
    def is_problem(self) -> bool:
        return self in (Status.ERROR, Status.FAILED)


@dataclass(frozen=True, slots=True)
class CheckLine:
    """``label: STATUS (detail)``; the detail is omitted when empty."""

    label: str
    status: Status
    detail: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.label}: {self.status.value}"
        return f"{text} ({self.detail})" if self.detail else text


def emit(label: str, status: Status = Status.OK, detail: Optional[str] = None) -> None:
    print(CheckLine(label, status, detail))
