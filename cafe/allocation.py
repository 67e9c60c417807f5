"""Shared, capacity-limited resources: the waiting line and the tables."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from config import MAX_TABLES, QUEUE_FRONT_Y, QUEUE_MIN_Y, QUEUE_SPACING, QUEUE_X, TABLE_POSITIONS


class WaitingLine:
    """Strict FIFO of customer ids.

    ``_rank`` mirrors ``_order`` so membership and rank lookups are O(1);
    removing from the middle compacts the line and re-ranks the tail.
    """

    def __init__(self) -> None:
        self._order: List[int] = []
        self._rank: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, customer_id: object) -> bool:
        return customer_id in self._rank

    def rank(self, customer_id: int) -> int:
        return self._rank.get(customer_id, -1)

    def append(self, customer_id: int) -> bool:
        if customer_id in self._rank:
            return False
        self._rank[customer_id] = len(self._order)
        self._order.append(customer_id)
        return True

    def remove(self, customer_id: int) -> bool:
        idx = self._rank.pop(customer_id, None)
        if idx is None:
            return False
        del self._order[idx]
        for pos in range(idx, len(self._order)):
            self._rank[self._order[pos]] = pos
        return True

    def ids(self) -> List[int]:
        return list(self._order)


def queue_slot(rank: int) -> Tuple[float, float]:
    """Floor position of the given line rank; the tail bunches up by the door."""
    return QUEUE_X, max(QUEUE_MIN_Y, QUEUE_FRONT_Y - QUEUE_SPACING * max(0, rank))


class TableRegistry:
    """Fixed seating slots; only the first ``owned`` are in service."""

    def __init__(self, owned: int) -> None:
        self.slots: List[Optional[int]] = [None] * MAX_TABLES
        self.owned = max(0, min(MAX_TABLES, owned))

    def position(self, index: int) -> Tuple[float, float]:
        return TABLE_POSITIONS[index]

    def free_index(self) -> int:
        for idx in range(self.owned):
            if self.slots[idx] is None:
                return idx
        return -1

    def occupy(self, index: int, customer_id: int) -> bool:
        if not (0 <= index < self.owned) or self.slots[index] is not None:
            return False
        self.slots[index] = customer_id
        return True

    def release(self, index: int, customer_id: int) -> None:
        if 0 <= index < len(self.slots) and self.slots[index] == customer_id:
            self.slots[index] = None

    def add_table(self) -> bool:
        if self.owned >= MAX_TABLES:
            return False
        self.owned += 1
        return True
