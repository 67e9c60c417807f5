"""Typed actions submitted by an external decision source.

Nothing here raises on bad input: malformed entries are dropped and numeric
values are clamped before they reach the engine.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Optional

from config import ACTION_TARGET_MAX_LEN, ACTION_VALUE_LIMIT, MAX_ACTIONS_PER_DECISION

HIRE_BARISTA = "hire_barista"
FIRE_BARISTA = "fire_barista"
BUY_TABLE = "buy_table"
ADJUST_PRICE = "adjust_price"
UNLOCK_MENU_ITEM = "unlock_menu_item"
ORDER_COFFEE_BEANS = "order_coffee_beans"
ORDER_MILK = "order_milk"
ORDER_CAKE_STOCK = "order_cake_stock"
UPGRADE_COFFEE_MACHINE = "upgrade_coffee_machine"
UPGRADE_BARISTA_TRAINING = "upgrade_barista_training"
UPGRADE_AMBIANCE = "upgrade_ambiance"
UPGRADE_MARKETING = "upgrade_marketing"
DO_NOTHING = "do_nothing"

# Action type -> upgrade track it buys a level of
UPGRADE_ACTIONS: dict[str, str] = {
    UPGRADE_COFFEE_MACHINE: "coffee_machine",
    UPGRADE_BARISTA_TRAINING: "barista_training",
    UPGRADE_AMBIANCE: "ambiance",
    UPGRADE_MARKETING: "marketing",
}

VALID_ACTIONS: frozenset[str] = frozenset(
    {
        HIRE_BARISTA,
        FIRE_BARISTA,
        BUY_TABLE,
        ADJUST_PRICE,
        UNLOCK_MENU_ITEM,
        ORDER_COFFEE_BEANS,
        ORDER_MILK,
        ORDER_CAKE_STOCK,
        DO_NOTHING,
        *UPGRADE_ACTIONS,
    }
)


@dataclass(frozen=True)
class Action:
    type: str
    target: Optional[str] = None
    value: Optional[float] = None


def _parse_value(raw: Any) -> tuple[bool, Optional[float]]:
    """Return ``(ok, value)``; ``ok`` is False when the value must sink the action."""
    if raw is None:
        return True, None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return True, None
    if not math.isfinite(raw):
        return False, None
    return True, max(-ACTION_VALUE_LIMIT, min(ACTION_VALUE_LIMIT, float(raw)))


def parse_action(raw: Any) -> Optional[Action]:
    if isinstance(raw, Action):
        raw = {"type": raw.type, "target": raw.target, "value": raw.value}
    if not isinstance(raw, dict):
        return None
    action_type = str(raw.get("type") or "")
    if action_type not in VALID_ACTIONS:
        return None
    ok, value = _parse_value(raw.get("value"))
    if not ok:
        return None
    target = raw.get("target")
    return Action(
        type=action_type,
        target=target[:ACTION_TARGET_MAX_LEN] if isinstance(target, str) else None,
        value=value,
    )


def parse_actions(raw: Any) -> List[Action]:
    if not isinstance(raw, list):
        return []
    results: List[Action] = []
    for item in raw:
        action = parse_action(item)
        if action is None:
            continue
        results.append(action)
        if len(results) >= MAX_ACTIONS_PER_DECISION:
            break
    return results
