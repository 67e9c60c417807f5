"""Short-lived feedback objects driven by the simulation clock."""
from __future__ import annotations

from typing import Iterable, List

from config import POPUP_DURATION, POPUP_RISE_SPEED, STATION_Y
from cafe.entities import Barista, MoneyPopup, ProgressIndicator, StaffState


class EffectsLayer:
    def __init__(self) -> None:
        self.popups: List[MoneyPopup] = []
        self._next_id = 1

    def spawn_money(self, x: float, y: float, amount: float) -> MoneyPopup:
        popup = MoneyPopup(
            id=self._next_id,
            x=x,
            y=y,
            amount=f"{amount:.2f}",
            timer=POPUP_DURATION,
            max_timer=POPUP_DURATION,
        )
        self._next_id += 1
        self.popups.append(popup)
        return popup

    def tick(self, dt: float) -> None:
        alive: List[MoneyPopup] = []
        for popup in self.popups:
            popup.timer -= dt
            popup.y += POPUP_RISE_SPEED * dt
            if popup.timer > 0:
                alive.append(popup)
        self.popups = alive

    @staticmethod
    def progress_indicators(staff: Iterable[Barista]) -> List[ProgressIndicator]:
        return [
            ProgressIndicator(staff_id=b.id, x=b.x, y=STATION_Y + 0.6, fraction=b.progress_fraction)
            for b in staff
            if b.state == StaffState.PREPARING
        ]
