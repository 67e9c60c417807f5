from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable

MENU_FILE = Path("data/menu.json")
ITEM_ID_RE = re.compile(r"^[a-z][a-z0-9_]*$")
MENU_CATEGORIES = ("coffee", "cake")


@dataclass(frozen=True)
class MenuDefinition:
    key: str
    display_name: str
    category: str
    price: float
    prep_time: float
    beans: int = 0
    milk: int = 0
    unlocked: bool = False
    unlock_cost: int = 0
    wholesale_cost: float = 0.0

    def to_runtime_dict(self) -> Dict[str, str | int | float | bool]:
        return {
            "display_name": self.display_name,
            "category": self.category,
            "price": self.price,
            "prep_time": self.prep_time,
            "beans": self.beans,
            "milk": self.milk,
            "unlocked": self.unlocked,
            "unlock_cost": self.unlock_cost,
            "wholesale_cost": self.wholesale_cost,
        }


DEFAULT_MENU: Dict[str, MenuDefinition] = {
    "espresso": MenuDefinition("espresso", "Espresso", "coffee", 3.0, 2.5, beans=1, unlocked=True),
    "latte": MenuDefinition("latte", "Latte", "coffee", 4.5, 4.0, beans=1, milk=1, unlocked=True),
    "cappuccino": MenuDefinition("cappuccino", "Cappuccino", "coffee", 4.25, 3.5, beans=1, milk=1, unlock_cost=60),
    "mocha": MenuDefinition("mocha", "Mocha", "coffee", 5.0, 4.5, beans=1, milk=1, unlock_cost=90),
    "cold_brew": MenuDefinition("cold_brew", "Cold Brew", "coffee", 4.75, 3.0, beans=2, unlock_cost=110),
    "matcha_latte": MenuDefinition("matcha_latte", "Matcha Latte", "coffee", 5.25, 4.0, milk=1, unlock_cost=140),
    "cheesecake": MenuDefinition("cheesecake", "Cheesecake", "cake", 5.5, 2.0, unlocked=True, wholesale_cost=2.0),
    "carrot_cake": MenuDefinition("carrot_cake", "Carrot Cake", "cake", 5.0, 2.0, unlock_cost=80, wholesale_cost=1.8),
    "chocolate_cake": MenuDefinition("chocolate_cake", "Chocolate Cake", "cake", 5.75, 2.0, unlock_cost=100, wholesale_cost=2.3),
    "tiramisu": MenuDefinition("tiramisu", "Tiramisu", "cake", 6.0, 2.5, beans=1, unlock_cost=120, wholesale_cost=2.5),
}


def _is_valid_item_id(value: str) -> bool:
    return bool(ITEM_ID_RE.fullmatch(value))


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and math.isfinite(value) and value > 0


def _coerce_int(value: Any, *, minimum: int | None = None) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        result = value
    elif isinstance(value, float) and value.is_integer():
        result = int(value)
    else:
        return None

    if minimum is not None and result < minimum:
        return None
    return result


def _parse_menu_entry(key: str, entry: Dict[str, Any]) -> MenuDefinition | None:
    if not _is_valid_item_id(key):
        return None

    display_name = entry.get("display_name")
    category = entry.get("category")
    price = entry.get("price")
    prep_time = entry.get("prep_time")
    beans = _coerce_int(entry.get("beans", 0), minimum=0)
    milk = _coerce_int(entry.get("milk", 0), minimum=0)
    unlocked = entry.get("unlocked", False)
    unlock_cost = _coerce_int(entry.get("unlock_cost", 0), minimum=0)
    wholesale_cost = entry.get("wholesale_cost", 0.0)

    if not isinstance(display_name, str) or not display_name.strip():
        return None
    if not isinstance(category, str) or category.strip().lower() not in MENU_CATEGORIES:
        return None
    if not _is_positive_number(price):
        return None
    if not _is_positive_number(prep_time):
        return None
    if beans is None or milk is None or unlock_cost is None:
        return None
    if wholesale_cost != 0.0 and not _is_positive_number(wholesale_cost):
        return None
    if not isinstance(unlocked, bool):
        return None

    return MenuDefinition(
        key=key,
        display_name=display_name.strip(),
        category=category.strip().lower(),
        price=round(float(price), 2),
        prep_time=float(prep_time),
        beans=beans,
        milk=milk,
        unlocked=unlocked,
        unlock_cost=unlock_cost,
        wholesale_cost=round(float(wholesale_cost), 2),
    )


def _ordered_runtime_catalog(items: Iterable[MenuDefinition]) -> Dict[str, Dict[str, str | int | float | bool]]:
    ordered = sorted(items, key=lambda item: (item.category, item.key))
    return {item.key: item.to_runtime_dict() for item in ordered}


def load_menu_catalog(path: Path = MENU_FILE) -> Dict[str, Dict[str, str | int | float | bool]]:
    defaults = _ordered_runtime_catalog(DEFAULT_MENU.values())
    if not path.exists():
        return defaults

    try:
        raw = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return defaults

    if not isinstance(raw, dict):
        return defaults

    items: Dict[str, MenuDefinition] = {}
    for key, entry in raw.items():
        if not isinstance(key, str) or not isinstance(entry, dict):
            continue
        item = _parse_menu_entry(key, entry)
        if item is None:
            continue
        items[key] = item

    # A menu nobody can order from would stall the spawner
    if not any(item.unlocked for item in items.values()):
        return defaults

    return _ordered_runtime_catalog(items.values())
