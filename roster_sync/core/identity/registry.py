"""
Person ID (BEL code) registry.

IDs are small non-negative integers bound to strict identity keys. Existing
IDs are read from the sources that carry them; identities without one get
the lowest integer >= 1 nobody uses yet.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional

from .models import RosterRow
from .names import strict_key

logger = logging.getLogger(__name__)


class IdentityRegistry:
    """
    Maps strict identity keys to durable person IDs for one run.

    Sources must be scanned in priority order (Directory first): the first
    explicit ID seen for a key wins, later ones only reserve their number.
    """

    def __init__(self) -> None:
        self._key_to_id: dict[str, int] = {}
        self._used: set[int] = set()
        self._cursor = 1
        self.generated: list[int] = []

    def observe(self, key: str, explicit_id: Optional[int]) -> None:
        """
        Record one source row.

        The explicit ID is reserved even when ``key`` is empty, so a number
        shown on an unusable row is never handed to somebody else.
        """
        if explicit_id is None:
            return
        self._used.add(explicit_id)
        if key and key not in self._key_to_id:
            self._key_to_id[key] = explicit_id

    def scan(self, rows: Iterable[RosterRow]) -> int:
        """Observe every row of one source; returns the number of explicit IDs seen."""
        seen = 0
        for row in rows:
            if row.person_id is None:
                continue
            seen += 1
            # Policy: strict key, the same one used for Directory membership.
            self.observe(strict_key(row.last_name, row.first_name), row.person_id)
        return seen

    def generate_id(self) -> int:
        """
        Hand out the lowest unused ID at or above the cursor.

        The cursor only moves forward, so IDs generated within one run are
        strictly increasing even if an earlier one is never persisted.
        """
        while self._cursor in self._used:
            self._cursor += 1
        new_id = self._cursor
        self._used.add(new_id)
        self._cursor += 1
        self.generated.append(new_id)
        return new_id

    def resolve(self, key: str) -> int:
        """ID bound to ``key``, generating and binding one on first sight."""
        existing = self._key_to_id.get(key)
        if existing is not None:
            return existing
        new_id = self.generate_id()
        self._key_to_id[key] = new_id
        logger.debug("Assigned new person ID %s to %s", new_id, key)
        return new_id

    def __len__(self) -> int:
        return len(self._key_to_id)
