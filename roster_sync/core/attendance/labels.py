from __future__ import annotations

import re
from datetime import date

SUNDAY_SERVICE = "Sunday Service"
PASTORAL_CHECK_IN = "Pastoral Check-In"

_SUNDAY_SERVICE = re.compile(r"sunday service", re.IGNORECASE)
# Historic spellings include "Pastoral check -In" and "pastoral checkin"
_PASTORAL_CHECK_IN = re.compile(r"pastoral\s*check[-\s]*in", re.IGNORECASE)


def is_sunday_service(event_name: str) -> bool:
    return bool(_SUNDAY_SERVICE.search(event_name or ""))


def is_pastoral_check_in(event_name: str) -> bool:
    """
    True when the whole label is a pastoral check-in, in any historic spelling.

    "Pastoral check -In" qualifies; "Missed pastoral check in" does not.
    """
    return bool(_PASTORAL_CHECK_IN.fullmatch((event_name or "").strip()))


def canonical_event_name(event_name: str) -> str:
    """Display label for an event, with pastoral check-ins forced to one spelling."""
    name = (event_name or "").strip()
    if _PASTORAL_CHECK_IN.search(name):
        return PASTORAL_CHECK_IN
    return name


def event_key(event_name: str, event_date: date) -> tuple[str, date]:
    """
    Unit of attendance counting.

    Every Sunday-service label collapses to the same key for a given day, so
    the same service recorded by two tabs counts once.
    """
    if is_sunday_service(event_name):
        return SUNDAY_SERVICE, event_date
    return (event_name or "").strip(), event_date
