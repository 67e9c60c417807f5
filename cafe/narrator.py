"""Narration log and the heuristic "AI narrator" policy.

The policy runs on a coarser cadence than the simulation tick.  Each run it
may hire one barista when the line is long and money allows, then it always
writes exactly one templated observation picked by weighted random choice.
"""
from __future__ import annotations

import logging
import random
import re
from typing import TYPE_CHECKING, Callable, Dict, List, Tuple

from config import (
    HIRE_COST,
    HIRE_QUEUE_THRESHOLD,
    NARRATION_CATEGORIES,
    NARRATION_LIMIT,
    NARRATION_WEIGHTS,
    POLICY_INTERVAL,
    STATION_COUNT,
    THOUGHT_MAX_LEN,
)
from cafe.entities import NarrationEntry

if TYPE_CHECKING:
    from cafe.simulation import CafeSim

logger = logging.getLogger(__name__)

_LABELS = "response|thought|observation|reflection|strategy|decision"
_LEADING_LABEL_RE = re.compile(rf"^\[({_LABELS})\]\s*", re.IGNORECASE)
_LEADING_BRACKET_RE = re.compile(r"^\[.*?\]\s*")
_MARKDOWN_LABEL_RE = re.compile(rf"^#+\s*({_LABELS}):\s*", re.IGNORECASE)
_PREFIX_LABEL_RE = re.compile(rf"^({_LABELS}):\s*", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


def clean_narration_text(text: str) -> str:
    """Strip bracketed/markdown labels and collapse whitespace."""
    if not text:
        return ""
    cleaned = text.strip()
    cleaned = _LEADING_LABEL_RE.sub("", cleaned)
    cleaned = _LEADING_BRACKET_RE.sub("", cleaned)
    cleaned = _MARKDOWN_LABEL_RE.sub("", cleaned)
    cleaned = _PREFIX_LABEL_RE.sub("", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    return cleaned.strip()[:THOUGHT_MAX_LEN]


class NarrationLog:
    """Newest-first, bounded list of narration entries."""

    def __init__(self, limit: int = NARRATION_LIMIT) -> None:
        self.limit = limit
        self.entries: List[NarrationEntry] = []
        self._next_id = 1

    def __len__(self) -> int:
        return len(self.entries)

    def add(self, text: str, category: str, now: float) -> NarrationEntry:
        if category not in NARRATION_CATEGORIES:
            category = "observation"
        entry = NarrationEntry(id=self._next_id, text=text, category=category, created_at=now)
        self._next_id += 1
        self.entries.insert(0, entry)
        del self.entries[self.limit:]
        return entry

    def view(self, now: float) -> List[Dict[str, object]]:
        return [
            {"id": e.id, "text": e.text, "type": e.category, "age": round(e.age(now), 2)}
            for e in self.entries
        ]


def _money(value: float) -> str:
    return f"${value:,.2f}"


class HeuristicPolicy:
    def __init__(self, rng: random.Random, interval: float = POLICY_INTERVAL) -> None:
        self.rng = rng
        self.interval = interval
        self.timer: float = 0.0
        self.last_rating: float | None = None
        self._templates: Dict[str, Tuple[str, Callable[["CafeSim"], str]]] = {
            "rating_trend": ("observation", self._rating_trend),
            "average_wait": ("observation", self._average_wait),
            "product_mix": ("reflection", self._product_mix),
            "revenue_trend": ("strategy", self._revenue_trend),
            "hiring_outlook": ("strategy", self._hiring_outlook),
            "customers_served": ("reflection", self._customers_served),
            "floor_snapshot": ("observation", self._floor_snapshot),
        }

    def tick(self, sim: "CafeSim", dt: float) -> bool:
        self.timer += dt
        if self.timer < self.interval:
            return False
        self.timer -= self.interval
        self.run(sim)
        return True

    def run(self, sim: "CafeSim") -> None:
        hired = sim.hire_barista(cost=HIRE_COST) if self._should_hire(sim) else None
        if hired is not None:
            sim.narrate(
                f"The line is {sim.queue_length} deep, so I hired barista #{hired.id} for {_money(HIRE_COST)}.",
                "decision",
            )
            logger.info("Policy hired barista %d (queue=%d)", hired.id, sim.queue_length)

        names = list(self._templates)
        weights = [NARRATION_WEIGHTS.get(name, 1.0) for name in names]
        key = self.rng.choices(names, weights=weights, k=1)[0]
        category, render = self._templates[key]
        sim.narrate(render(sim), category)
        self.last_rating = sim.ledger.rating

    @staticmethod
    def _should_hire(sim: "CafeSim") -> bool:
        return (
            sim.queue_length >= HIRE_QUEUE_THRESHOLD
            and sim.staff_count < STATION_COUNT
            and sim.ledger.funds >= HIRE_COST
        )

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def _rating_trend(self, sim: "CafeSim") -> str:
        rating = sim.ledger.rating
        if self.last_rating is None or abs(rating - self.last_rating) < 0.05:
            return f"Rating is holding at {rating:.1f} stars."
        direction = "up" if rating > self.last_rating else "down"
        return f"Rating is {direction} to {rating:.1f} stars from {self.last_rating:.1f}."

    @staticmethod
    def _average_wait(sim: "CafeSim") -> str:
        ledger = sim.ledger
        if ledger.customers_served == 0:
            return "No orders finished yet; watching the first arrivals."
        return f"Average wait is {ledger.average_wait:.1f}s across {ledger.customers_served} customers."

    @staticmethod
    def _product_mix(sim: "CafeSim") -> str:
        coffee = sim.ledger.sold_by_category.get("coffee", 0)
        cake = sim.ledger.sold_by_category.get("cake", 0)
        if coffee + cake == 0:
            return "Nothing sold yet, so no product mix to read."
        if cake == 0:
            return f"All {coffee} sales so far are coffee; cakes are not moving."
        return f"Coffee to cake is running {coffee}:{cake} ({coffee / cake:.1f}x)."

    @staticmethod
    def _revenue_trend(sim: "CafeSim") -> str:
        ledger = sim.ledger
        if ledger.day == 1:
            return f"First day so far: {_money(ledger.daily_revenue)} from {ledger.orders_today} orders."
        if ledger.daily_revenue >= ledger.previous_day_revenue:
            return (
                f"Day {ledger.day} is at {_money(ledger.daily_revenue)}, already level with or past "
                f"yesterday's {_money(ledger.previous_day_revenue)}."
            )
        return (
            f"Day {ledger.day} is at {_money(ledger.daily_revenue)}, still behind "
            f"yesterday's {_money(ledger.previous_day_revenue)}."
        )

    @staticmethod
    def _hiring_outlook(sim: "CafeSim") -> str:
        if sim.staff_count >= STATION_COUNT:
            return f"All {STATION_COUNT} stations are staffed; no room for another barista."
        shortfall = HIRE_COST - sim.ledger.funds
        if shortfall > 0:
            return f"Need {_money(shortfall)} more before another hire is possible."
        return f"Could afford another barista ({_money(HIRE_COST)}) if the line keeps growing."

    @staticmethod
    def _customers_served(sim: "CafeSim") -> str:
        ledger = sim.ledger
        if ledger.walkouts:
            return f"{ledger.customers_served} customers served so far, {ledger.walkouts} walked out."
        return f"{ledger.customers_served} customers served so far."

    @staticmethod
    def _floor_snapshot(sim: "CafeSim") -> str:
        return f"{sim.staff_count} barista(s) on shift, {sim.queue_length} waiting in line."
