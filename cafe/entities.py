"""Core dataclasses for the café simulation.

Entities are plain records keyed by a stable integer id.  They carry no
rendering handles; a renderer keeps its own side table keyed by the same ids.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class StaffState(str, Enum):
    IDLE = "idle"
    GOING_TO_COUNTER = "going_to_counter"
    TAKING_ORDER = "taking_order"
    GOING_TO_STATION = "going_to_station"
    PREPARING = "preparing"
    GOING_TO_SERVE = "going_to_serve"
    SERVING = "serving"


class CustomerState(str, Enum):
    ENTERING = "entering"
    QUEUING = "queuing"
    AT_COUNTER = "at_counter"
    WAITING_FOR_ITEM = "waiting_for_item"
    GOING_TO_TABLE = "going_to_table"
    SITTING = "sitting"
    LEAVING = "leaving"


@dataclass
class Order:
    """What a customer decided to buy when walking in."""

    key: str
    name: str
    category: str
    price: float
    prep_time: float


@dataclass
class Barista:
    """A staff member bound to one station (coffee machine + counter spot)."""

    id: int
    station: int
    x: float
    y: float
    target_x: float
    target_y: float
    state: StaffState = StaffState.IDLE
    timer: float = 0.0
    serving_customer_id: Optional[int] = None
    prep_time: float = 0.0
    prep_progress: float = 0.0

    @property
    def progress_fraction(self) -> float:
        if self.prep_time <= 0:
            return 0.0
        return max(0.0, min(1.0, self.prep_progress / self.prep_time))


@dataclass
class Customer:
    """A visitor walking the enter → queue → order → pickup → seat/leave cycle.

    ``total_wait`` stays ``None`` until the sale is finalised and is never
    rewritten afterwards.  ``table_index`` is ``-1`` while unseated.  A tip
    earned at the counter is left on the table when the customer gets up.
    """

    id: int
    x: float
    y: float
    target_x: float
    target_y: float
    order: Order
    wait_start: float
    state: CustomerState = CustomerState.ENTERING
    timer: float = 0.0
    total_wait: Optional[float] = None
    table_index: int = -1
    served_by: Optional[int] = None
    sit_duration: float = 0.0
    tip_amount: float = 0.0


@dataclass
class StockDelivery:
    """An ingredient or cake order on its way to the café."""

    kind: str
    quantity: int
    remaining: float


@dataclass
class NarrationEntry:
    id: int
    text: str
    category: str
    created_at: float

    def age(self, now: float) -> float:
        return max(0.0, now - self.created_at)


@dataclass
class MoneyPopup:
    """Floating payment confirmation; purely cosmetic."""

    id: int
    x: float
    y: float
    amount: str
    timer: float
    max_timer: float


@dataclass
class ProgressIndicator:
    staff_id: int
    x: float
    y: float
    fraction: float
