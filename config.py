"""Centralised configuration constants for the café simulator."""
from __future__ import annotations

from pathlib import Path

# ---------------------------------------------------------------------------
# Floor geometry (world units, y grows toward the back wall)
# ---------------------------------------------------------------------------
ENTRY_POS: tuple[float, float] = (17.5, 0.5)
EXIT_POS: tuple[float, float] = (17.5, -0.5)

# Customer side of the register, where the front of the line places its order
ORDER_SPOT: tuple[float, float] = (14.0, 9.0)
# Barista side of the register
REGISTER_SPOT: tuple[float, float] = (14.0, 11.0)

# Waiting line runs from just below the order spot toward the door
QUEUE_X: float = 14.6
QUEUE_FRONT_Y: float = 8.2
QUEUE_SPACING: float = 0.8
QUEUE_MIN_Y: float = 1.0

# One coffee machine per station; the x coordinate anchors every station spot
STATION_XS: list[float] = [3.0, 7.0, 11.0]
STATION_COUNT: int = len(STATION_XS)
STATION_Y: float = 11.5          # barista stands here while preparing
STATION_HOME_OFFSET: float = 1.0  # idle barista drifts beside its machine
SERVE_Y: float = 10.8            # barista hands the item over the counter here
PICKUP_Y: float = 9.2            # customer waits for the item here

TABLE_POSITIONS: list[tuple[float, float]] = [
    (3.0, 6.0), (7.0, 6.0), (12.0, 6.0), (16.0, 6.0),
    (3.0, 3.0), (7.0, 3.0), (12.0, 3.0), (16.0, 3.0),
]
MAX_TABLES: int = len(TABLE_POSITIONS)
TABLE_JITTER: float = 0.3

# ---------------------------------------------------------------------------
# File paths
# ---------------------------------------------------------------------------
MENU_FILE: Path = Path("data/menu.json")

# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------
MAX_FRAME_DELTA: float = 0.1   # largest step accepted from one frame

# ---------------------------------------------------------------------------
# Movement
# ---------------------------------------------------------------------------
STAFF_SPEED: float = 5.0       # units per second
CUSTOMER_SPEED: float = 3.0    # units per second
ARRIVE_EPSILON: float = 0.05   # distance under which a move snaps to target

# ---------------------------------------------------------------------------
# Service timings
# ---------------------------------------------------------------------------
TAKE_ORDER_TIME: float = 1.0
SERVE_TIME: float = 0.5
SIT_MIN: float = 8.0
SIT_MAX: float = 16.0

# ---------------------------------------------------------------------------
# Arrivals
# ---------------------------------------------------------------------------
SPAWN_INTERVAL_BASE: float = 6.0   # seconds between arrivals on day 1
SPAWN_INTERVAL_STEP: float = 0.4   # interval shrinks by this much per day
SPAWN_INTERVAL_MIN: float = 2.5
MAX_ACTIVE_CUSTOMERS: int = 12

# ---------------------------------------------------------------------------
# Days
# ---------------------------------------------------------------------------
DAY_LENGTH: float = 90.0

# ---------------------------------------------------------------------------
# Rating: exponentially smoothed per completed order (1–5 stars)
# ---------------------------------------------------------------------------
RATING_MIN: float = 1.0
RATING_MAX: float = 5.0
RATING_STARTING: float = 5.0
RATING_SMOOTHING: float = 0.95

# (max wait, quality score) checked in order; anything slower gets the floor
WAIT_QUALITY_TIERS: list[tuple[float, float]] = [
    (8.0, 5.0),
    (15.0, 4.0),
    (25.0, 3.0),
]
WAIT_QUALITY_FLOOR: float = 2.0
WALKOUT_QUALITY: float = 1.0   # folded in when a customer leaves unserved

# ---------------------------------------------------------------------------
# Economy
# ---------------------------------------------------------------------------
STARTING_FUNDS: float = 100.0
STARTING_STAFF: int = 1
HIRE_COST: float = 75.0

STARTING_TABLES: int = 2
TABLE_PRICES: list[int] = [120, 160, 200, 250, 300, 350]

PRICE_MIN: float = 0.5
PRICE_MAX: float = 20.0

# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------
STARTING_BEANS: int = 40
STARTING_MILK: int = 30
BEANS_BATCH: int = 40
BEANS_BATCH_COST: float = 12.0
MILK_BATCH: int = 30
MILK_BATCH_COST: float = 6.0
DELIVERY_TIME: float = 60.0

# Cakes are bought ready-made: each has its own counter, restocked in batches
STARTING_CAKE_STOCK: int = 10
CAKE_BATCH: int = 10

# ---------------------------------------------------------------------------
# Wages and tips
# ---------------------------------------------------------------------------
WAGE_PER_BARISTA: float = 14.0   # charged per barista every payroll period
PAYROLL_INTERVAL: float = 60.0
TIP_MIN_QUALITY: float = 4.0     # only quick service earns a tip
TIP_RATE_MIN: float = 0.05       # fraction of the order price
TIP_RATE_MAX: float = 0.20

# ---------------------------------------------------------------------------
# Upgrades
# ---------------------------------------------------------------------------
UPGRADE_COSTS: dict[str, list[int]] = {
    "coffee_machine": [200, 350, 550, 800, 1200],
    "barista_training": [150, 300, 500, 750, 1100],
    "ambiance": [100, 200, 400, 650, 950],
    "marketing": [120, 250, 400, 600, 900],
}
UPGRADE_MAX_LEVEL: int = 5

MACHINE_PREP_CUT: float = 0.1        # prep time shrinks by this fraction per level
TRAINING_SERVICE_CUT: float = 0.1    # order taking and hand-over shrink per level
SPEED_MULTIPLIER_FLOOR: float = 0.5
AMBIANCE_QUALITY_BONUS: float = 0.2  # added to each sale's quality score per level
AMBIANCE_ARRIVAL_CUT: float = 0.03   # arrival interval shrinks per level
MARKETING_ARRIVAL_CUT: float = 0.06

# ---------------------------------------------------------------------------
# Heuristic policy / narration
# ---------------------------------------------------------------------------
POLICY_INTERVAL: float = 12.0
HIRE_QUEUE_THRESHOLD: int = 3
NARRATION_LIMIT: int = 20
EVENT_LOG_LIMIT: int = 12

NARRATION_CATEGORIES: tuple[str, ...] = ("strategy", "observation", "decision", "reflection")

# Relative weights of the observation templates picked each policy run
NARRATION_WEIGHTS: dict[str, float] = {
    "rating_trend": 3.0,
    "average_wait": 2.5,
    "product_mix": 1.5,
    "revenue_trend": 2.0,
    "hiring_outlook": 1.5,
    "customers_served": 1.0,
    "floor_snapshot": 2.0,
}

# ---------------------------------------------------------------------------
# External decisions
# ---------------------------------------------------------------------------
MAX_ACTIONS_PER_DECISION: int = 5
ACTION_VALUE_LIMIT: float = 5.0
ACTION_TARGET_MAX_LEN: int = 50
THOUGHT_MAX_LEN: int = 500

# ---------------------------------------------------------------------------
# Transient effects
# ---------------------------------------------------------------------------
POPUP_DURATION: float = 1.2
POPUP_RISE_SPEED: float = 0.8
