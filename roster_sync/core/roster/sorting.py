from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Generic, Optional, TypeVar

from ..attendance.models import ActivityTier

T = TypeVar("T")

TIER_RANKS: dict[ActivityTier, int] = {
    ActivityTier.CORE: 0,
    ActivityTier.ACTIVE: 1,
    ActivityTier.INACTIVE: 2,
    ActivityTier.ARCHIVE: 3,
}
UNKNOWN_RANK = 4


def rank_for_tier(tier: Optional[ActivityTier]) -> int:
    if tier is None:
        return UNKNOWN_RANK
    return TIER_RANKS[tier]


class StatusSorter(Generic[T]):
    """
    Orders roster rows: guests first, then tier rank, then last and first
    name case-insensitively, then original position.

    The original position is part of the key, so every pair of rows compares
    unequal and sorting already-sorted rows returns them unchanged.
    """

    def __init__(
        self,
        *,
        tier_rank: Callable[[T], int],
        last_name: Callable[[T], str],
        first_name: Callable[[T], str],
        is_guest: Optional[Callable[[T], bool]] = None,
    ) -> None:
        self._tier_rank = tier_rank
        self._last_name = last_name
        self._first_name = first_name
        self._is_guest = is_guest

    def key(self, item: T, position: int) -> tuple[int, int, str, str, int]:
        guest = self._is_guest(item) if self._is_guest else False
        return (
            0 if guest else 1,
            self._tier_rank(item),
            (self._last_name(item) or "").strip().lower(),
            (self._first_name(item) or "").strip().lower(),
            position,
        )

    def sort(self, items: Sequence[T]) -> list[T]:
        indexed = sorted(enumerate(items), key=lambda pair: self.key(pair[1], pair[0]))
        return [item for _position, item in indexed]
