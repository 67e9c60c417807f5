"""Running financial and quality metrics."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from config import (
    DAY_LENGTH,
    RATING_MAX,
    RATING_MIN,
    RATING_SMOOTHING,
    RATING_STARTING,
    STARTING_FUNDS,
    TIP_MIN_QUALITY,
    WAIT_QUALITY_FLOOR,
    WAIT_QUALITY_TIERS,
    WALKOUT_QUALITY,
)
from menu_catalog import MENU_CATEGORIES


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def wait_quality(wait: float) -> float:
    """Step function: short waits score best, three slower tiers below it."""
    for limit, score in WAIT_QUALITY_TIERS:
        if wait < limit:
            return score
    return WAIT_QUALITY_FLOOR


def next_rating(rating: float, quality: float) -> float:
    """One step of the smoothed rating: blend, round to a tenth, clamp."""
    blended = rating * RATING_SMOOTHING + quality * (1.0 - RATING_SMOOTHING)
    return clamp(round(blended, 1), RATING_MIN, RATING_MAX)


@dataclass
class DaySummary:
    day: int
    revenue: float
    orders: int


class Ledger:
    """Cumulative totals, daily counters and the smoothed rating.

    ``total_spend`` covers every outgoing (hires, tables, stock, upgrades,
    wages) so ``profit_margin`` compares it against sales plus tips.
    """

    def __init__(self, funds: float = STARTING_FUNDS) -> None:
        self.funds: float = funds
        self.total_spend: float = 0.0
        self.revenue: float = 0.0
        self.tips: float = 0.0
        self.wages_paid: float = 0.0
        self.unpaid_wages: float = 0.0
        self.daily_revenue: float = 0.0
        self.previous_day_revenue: float = 0.0
        self.sold_by_category: Dict[str, int] = {category: 0 for category in MENU_CATEGORIES}
        self.customers_served: int = 0
        self.orders_today: int = 0
        self.total_wait: float = 0.0
        self.walkouts: int = 0
        self.streak: int = 0
        self.best_streak: int = 0
        self.day: int = 1
        self.day_timer: float = 0.0
        self.rating: float = RATING_STARTING

    # ------------------------------------------------------------------
    # Derived metrics
    # ------------------------------------------------------------------

    @property
    def average_wait(self) -> float:
        if self.customers_served == 0:
            return 0.0
        return self.total_wait / self.customers_served

    @property
    def profit_margin(self) -> float:
        """Percent of income kept after every spend; 0 before the first sale."""
        income = self.revenue + self.tips
        if income <= 0:
            return 0.0
        return round((income - self.total_spend) / income * 100.0, 1)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def record_sale(self, price: float, category: str, wait: float, bonus: float = 0.0) -> float:
        """Book a completed order and return the quality score it earned."""
        self.funds = round(self.funds + price, 2)
        self.revenue = round(self.revenue + price, 2)
        self.daily_revenue = round(self.daily_revenue + price, 2)
        self.sold_by_category[category] = self.sold_by_category.get(category, 0) + 1
        self.customers_served += 1
        self.orders_today += 1
        self.total_wait += wait

        quality = min(RATING_MAX, wait_quality(wait) + bonus)
        self.rating = next_rating(self.rating, quality)
        if quality >= TIP_MIN_QUALITY:
            self.streak += 1
            self.best_streak = max(self.best_streak, self.streak)
        else:
            self.streak = 0
        return quality

    def record_tip(self, amount: float) -> None:
        if amount <= 0:
            return
        self.funds = round(self.funds + amount, 2)
        self.tips = round(self.tips + amount, 2)

    def record_walkout(self) -> None:
        self.walkouts += 1
        self.streak = 0
        self.rating = next_rating(self.rating, WALKOUT_QUALITY)

    def spend(self, amount: float) -> bool:
        if amount < 0 or self.funds < amount:
            return False
        self.funds = round(self.funds - amount, 2)
        self.total_spend = round(self.total_spend + amount, 2)
        return True

    def pay_wages(self, amount: float) -> float:
        """Pay as much of the wage bill as funds allow; returns the shortfall."""
        if amount <= 0:
            return 0.0
        paid = min(amount, max(0.0, self.funds))
        self.funds = round(self.funds - paid, 2)
        self.total_spend = round(self.total_spend + paid, 2)
        self.wages_paid = round(self.wages_paid + paid, 2)
        shortfall = round(amount - paid, 2)
        self.unpaid_wages = round(self.unpaid_wages + shortfall, 2)
        return shortfall

    def advance_day(self, dt: float) -> DaySummary | None:
        self.day_timer += dt
        if self.day_timer < DAY_LENGTH:
            return None
        self.day_timer -= DAY_LENGTH
        return self.rollover()

    def rollover(self) -> DaySummary:
        closed = DaySummary(day=self.day, revenue=self.daily_revenue, orders=self.orders_today)
        self.day += 1
        self.previous_day_revenue = self.daily_revenue
        self.daily_revenue = 0.0
        self.orders_today = 0
        return closed
