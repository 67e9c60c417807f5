"""CafeSim: deterministic, headless café floor simulation.

All gameplay constants are imported from ``config``.  The simulation has no
rendering dependency: a renderer calls :meth:`CafeSim.update` once per frame
and then reads :meth:`CafeSim.to_dict`, which never mutates engine state.
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import (
    AMBIANCE_ARRIVAL_CUT,
    AMBIANCE_QUALITY_BONUS,
    ARRIVE_EPSILON,
    BEANS_BATCH,
    BEANS_BATCH_COST,
    CAKE_BATCH,
    CUSTOMER_SPEED,
    DELIVERY_TIME,
    ENTRY_POS,
    EVENT_LOG_LIMIT,
    EXIT_POS,
    HIRE_COST,
    MACHINE_PREP_CUT,
    MARKETING_ARRIVAL_CUT,
    MAX_ACTIVE_CUSTOMERS,
    MAX_TABLES,
    MENU_FILE,
    MILK_BATCH,
    MILK_BATCH_COST,
    ORDER_SPOT,
    PAYROLL_INTERVAL,
    PICKUP_Y,
    PRICE_MAX,
    PRICE_MIN,
    REGISTER_SPOT,
    SERVE_TIME,
    SERVE_Y,
    SIT_MAX,
    SIT_MIN,
    SPAWN_INTERVAL_BASE,
    SPAWN_INTERVAL_MIN,
    SPAWN_INTERVAL_STEP,
    SPEED_MULTIPLIER_FLOOR,
    STAFF_SPEED,
    STARTING_BEANS,
    STARTING_CAKE_STOCK,
    STARTING_MILK,
    STARTING_STAFF,
    STARTING_TABLES,
    STATION_COUNT,
    STATION_HOME_OFFSET,
    STATION_XS,
    STATION_Y,
    TABLE_JITTER,
    TABLE_PRICES,
    TAKE_ORDER_TIME,
    TIP_MIN_QUALITY,
    TIP_RATE_MAX,
    TIP_RATE_MIN,
    TRAINING_SERVICE_CUT,
    UPGRADE_COSTS,
    UPGRADE_MAX_LEVEL,
    WAGE_PER_BARISTA,
)
from cafe.actions import (
    ADJUST_PRICE,
    BUY_TABLE,
    DO_NOTHING,
    FIRE_BARISTA,
    HIRE_BARISTA,
    ORDER_COFFEE_BEANS,
    ORDER_CAKE_STOCK,
    ORDER_MILK,
    UNLOCK_MENU_ITEM,
    UPGRADE_ACTIONS,
    Action,
    parse_action,
    parse_actions,
)
from cafe.allocation import TableRegistry, WaitingLine, queue_slot
from cafe.clock import SimClock
from cafe.effects import EffectsLayer
from cafe.entities import (
    Barista,
    Customer,
    CustomerState,
    NarrationEntry,
    Order,
    StaffState,
    StockDelivery,
)
from cafe.ledger import DaySummary, Ledger, clamp
from cafe.narrator import HeuristicPolicy, NarrationLog, clean_narration_text
from menu_catalog import load_menu_catalog

MENU = load_menu_catalog(MENU_FILE)

STOCK_BATCHES: Dict[str, Tuple[int, float]] = {
    "coffee_beans": (BEANS_BATCH, BEANS_BATCH_COST),
    "milk": (MILK_BATCH, MILK_BATCH_COST),
}

logger = logging.getLogger(__name__)


def move_toward(entity: Barista | Customer, speed: float, dt: float) -> bool:
    """Step straight toward the entity's target; True once it has arrived.

    Arrival snaps the position exactly onto the target so entities never
    oscillate around it.
    """
    dx = entity.target_x - entity.x
    dy = entity.target_y - entity.y
    dist = math.hypot(dx, dy)
    step = speed * dt
    if dist > step:
        entity.x += dx / dist * step
        entity.y += dy / dist * step
        dist -= step
    else:
        dist = 0.0
    if dist < ARRIVE_EPSILON:
        entity.x, entity.y = entity.target_x, entity.target_y
        return True
    return False


def _set_target(entity: Barista | Customer, spot: Tuple[float, float]) -> None:
    entity.target_x, entity.target_y = spot


def home_spot(station: int) -> Tuple[float, float]:
    return STATION_XS[station] + STATION_HOME_OFFSET, STATION_Y


def station_spot(station: int) -> Tuple[float, float]:
    return STATION_XS[station], STATION_Y


def serve_spot(station: int) -> Tuple[float, float]:
    return STATION_XS[station], SERVE_Y


def pickup_spot(station: int) -> Tuple[float, float]:
    return STATION_XS[station], PICKUP_Y


class CafeSim:
    """Frame-stepped café simulation.

    All state mutations happen inside :meth:`tick` or one of the validated
    management methods (hire, buy table, adjust price, ...), which report
    failure by returning ``False`` rather than raising.
    """

    def __init__(self, seed: int = 7, menu: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        self.rng = random.Random(seed)
        self.menu: Dict[str, Dict[str, Any]] = {key: dict(entry) for key, entry in (menu or MENU).items()}
        self.clock = SimClock()
        self.ledger = Ledger()
        self.line = WaitingLine()
        self.tables = TableRegistry(STARTING_TABLES)
        self.staff: Dict[int, Barista] = {}
        self.customers: Dict[int, Customer] = {}
        self.effects = EffectsLayer()
        self.narration = NarrationLog()
        self.policy = HeuristicPolicy(self.rng)
        self.spawn_timer: float = 0.0
        self.stock: Dict[str, int] = {"coffee_beans": STARTING_BEANS, "milk": STARTING_MILK}
        self.cake_stock: Dict[str, int] = {
            key: STARTING_CAKE_STOCK for key, item in self.menu.items() if item.get("category") == "cake"
        }
        self.upgrades: Dict[str, int] = {track: 0 for track in UPGRADE_COSTS}
        self.payroll_timer: float = 0.0
        self.deliveries: List[StockDelivery] = []
        self.event_log: List[str] = []
        self._next_staff_id = 1
        self._next_customer_id = 1

        self._staff_handlers: Dict[StaffState, Callable[[Barista, float], None]] = {
            StaffState.IDLE: self._staff_idle,
            StaffState.GOING_TO_COUNTER: self._staff_going_to_counter,
            StaffState.TAKING_ORDER: self._staff_taking_order,
            StaffState.GOING_TO_STATION: self._staff_going_to_station,
            StaffState.PREPARING: self._staff_preparing,
            StaffState.GOING_TO_SERVE: self._staff_going_to_serve,
            StaffState.SERVING: self._staff_serving,
        }
        self._customer_handlers: Dict[CustomerState, Callable[[Customer, float], None]] = {
            CustomerState.ENTERING: self._customer_entering,
            CustomerState.QUEUING: self._customer_queuing,
            CustomerState.AT_COUNTER: self._customer_passive,
            CustomerState.WAITING_FOR_ITEM: self._customer_waiting_for_item,
            CustomerState.GOING_TO_TABLE: self._customer_going_to_table,
            CustomerState.SITTING: self._customer_sitting,
            CustomerState.LEAVING: self._customer_leaving,
        }
        self._action_handlers: Dict[str, Callable[[Action], bool]] = {
            HIRE_BARISTA: lambda action: self.hire_barista() is not None,
            FIRE_BARISTA: lambda action: self.fire_barista(),
            BUY_TABLE: lambda action: self.buy_table(),
            ADJUST_PRICE: self._apply_price_action,
            UNLOCK_MENU_ITEM: lambda action: self.unlock_menu_item(action.target or ""),
            ORDER_COFFEE_BEANS: lambda action: self.order_stock("coffee_beans"),
            ORDER_MILK: lambda action: self.order_stock("milk"),
            ORDER_CAKE_STOCK: lambda action: self.order_cake_stock(action.target or ""),
            DO_NOTHING: lambda action: True,
        }
        for action_type, track in UPGRADE_ACTIONS.items():
            self._action_handlers[action_type] = lambda action, track=track: self.buy_upgrade(track)

        for _ in range(STARTING_STAFF):
            self._add_barista()
        self._log_event("Café opened")

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    @property
    def time(self) -> float:
        return self.clock.time

    @property
    def queue_length(self) -> int:
        return len(self.line)

    @property
    def staff_count(self) -> int:
        return len(self.staff)

    @property
    def spawn_interval(self) -> float:
        shrunk = SPAWN_INTERVAL_BASE - SPAWN_INTERVAL_STEP * (self.ledger.day - 1)
        return max(SPAWN_INTERVAL_MIN, shrunk) * self.arrival_multiplier

    @property
    def ambiance_level(self) -> int:
        return self.upgrades["ambiance"]

    @property
    def arrival_multiplier(self) -> float:
        cut = AMBIANCE_ARRIVAL_CUT * self.upgrades["ambiance"] + MARKETING_ARRIVAL_CUT * self.upgrades["marketing"]
        return max(SPEED_MULTIPLIER_FLOOR, 1.0 - cut)

    @property
    def prep_multiplier(self) -> float:
        return max(SPEED_MULTIPLIER_FLOOR, 1.0 - MACHINE_PREP_CUT * self.upgrades["coffee_machine"])

    @property
    def service_multiplier(self) -> float:
        return max(SPEED_MULTIPLIER_FLOOR, 1.0 - TRAINING_SERVICE_CUT * self.upgrades["barista_training"])

    @property
    def take_order_time(self) -> float:
        return TAKE_ORDER_TIME * self.service_multiplier

    @property
    def serve_time(self) -> float:
        return SERVE_TIME * self.service_multiplier

    @property
    def quality_bonus(self) -> float:
        return AMBIANCE_QUALITY_BONUS * self.upgrades["ambiance"]

    @property
    def wage_bill(self) -> float:
        return WAGE_PER_BARISTA * len(self.staff)

    def unlocked_menu(self) -> List[str]:
        return [key for key, item in self.menu.items() if item.get("unlocked", False)]

    def next_table_price(self) -> Optional[int]:
        if self.tables.owned >= MAX_TABLES:
            return None
        idx = max(0, self.tables.owned - STARTING_TABLES)
        return TABLE_PRICES[min(idx, len(TABLE_PRICES) - 1)]

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------

    def _log_event(self, message: str) -> None:
        self.event_log.append(message)
        self.event_log = self.event_log[-EVENT_LOG_LIMIT:]

    def narrate(self, text: str, category: str) -> NarrationEntry:
        return self.narration.add(text, category, self.time)

    # ------------------------------------------------------------------
    # Staff management
    # ------------------------------------------------------------------

    def _free_station(self) -> int:
        taken = {barista.station for barista in self.staff.values()}
        for station in range(STATION_COUNT):
            if station not in taken:
                return station
        return -1

    def _add_barista(self) -> Optional[Barista]:
        station = self._free_station()
        if station < 0:
            return None
        hx, hy = home_spot(station)
        barista = Barista(id=self._next_staff_id, station=station, x=hx, y=hy, target_x=hx, target_y=hy)
        self._next_staff_id += 1
        self.staff[barista.id] = barista
        return barista

    def hire_barista(self, cost: float = HIRE_COST) -> Optional[Barista]:
        """Hire onto the lowest free station; returns the new barista or None."""
        if self._free_station() < 0:
            self._log_event("Hire failed: every station is staffed")
            return None
        if not self.ledger.spend(cost):
            self._log_event(f"Hire failed (need ${cost:.2f})")
            return None
        barista = self._add_barista()
        self._log_event(f"Barista #{barista.id} hired for station {barista.station + 1} (-${cost:.2f})")
        logger.info("Hired barista %d at station %d", barista.id, barista.station)
        return barista

    def fire_barista(self) -> bool:
        if len(self.staff) <= 1:
            self._log_event("Fire refused: the last barista stays")
            return False
        idle = [b for b in self.staff.values() if b.state == StaffState.IDLE and b.serving_customer_id is None]
        if not idle:
            self._log_event("Fire refused: every barista is busy")
            return False
        barista = max(idle, key=lambda b: b.id)
        del self.staff[barista.id]
        self._log_event(f"Barista #{barista.id} let go")
        logger.info("Fired barista %d", barista.id)
        return True

    # ------------------------------------------------------------------
    # Tables, menu and stock
    # ------------------------------------------------------------------

    def buy_table(self) -> bool:
        price = self.next_table_price()
        if price is None:
            self._log_event("Table purchase failed: floor is full")
            return False
        if not self.ledger.spend(price):
            self._log_event(f"Table purchase failed (need ${price})")
            return False
        self.tables.add_table()
        self._log_event(f"Table {self.tables.owned} bought (-${price})")
        return True

    def _resolve_menu_key(self, target: str) -> Optional[str]:
        if target in self.menu:
            return target
        wanted = target.strip().lower()
        for key, item in self.menu.items():
            if str(item.get("display_name", "")).lower() == wanted:
                return key
        return None

    def unlock_menu_item(self, target: str) -> bool:
        key = self._resolve_menu_key(target)
        if key is None:
            return False
        item = self.menu[key]
        if item.get("unlocked", False):
            return False
        cost = int(item.get("unlock_cost", 0))
        if not self.ledger.spend(cost):
            self._log_event(f"Unlock {item['display_name']} failed (need ${cost})")
            return False
        item["unlocked"] = True
        self._log_event(f"{item['display_name']} added to the menu (-${cost})")
        return True

    def adjust_price(self, target: str, delta: float) -> bool:
        key = self._resolve_menu_key(target)
        if key is None or not math.isfinite(delta) or delta == 0:
            return False
        item = self.menu[key]
        old_price = float(item["price"])
        new_price = round(clamp(old_price + delta, PRICE_MIN, PRICE_MAX), 2)
        if new_price == old_price:
            return False
        item["price"] = new_price
        self._log_event(f"{item['display_name']} now ${new_price:.2f}")
        return True

    def order_stock(self, kind: str) -> bool:
        if kind not in STOCK_BATCHES:
            return False
        quantity, cost = STOCK_BATCHES[kind]
        if not self.ledger.spend(cost):
            self._log_event(f"Stock order failed (need ${cost:.2f})")
            return False
        self.deliveries.append(StockDelivery(kind=kind, quantity=quantity, remaining=DELIVERY_TIME))
        self._log_event(f"Ordered {quantity} {kind.replace('_', ' ')} (-${cost:.2f})")
        return True

    def order_cake_stock(self, target: str) -> bool:
        key = self._resolve_menu_key(target)
        if key is None or self.menu[key].get("category") != "cake":
            return False
        item = self.menu[key]
        cost = round(float(item.get("wholesale_cost", 0.0)) * CAKE_BATCH, 2)
        if not self.ledger.spend(cost):
            self._log_event(f"{item['display_name']} order failed (need ${cost:.2f})")
            return False
        self.deliveries.append(StockDelivery(kind=key, quantity=CAKE_BATCH, remaining=DELIVERY_TIME))
        self._log_event(f"Ordered {CAKE_BATCH} {item['display_name']} (-${cost:.2f})")
        return True

    def buy_upgrade(self, track: str) -> bool:
        level = self.upgrades.get(track)
        if level is None:
            return False
        if level >= UPGRADE_MAX_LEVEL:
            self._log_event(f"{track.replace('_', ' ').title()} is already at max level")
            return False
        cost = UPGRADE_COSTS[track][level]
        if not self.ledger.spend(cost):
            self._log_event(f"Upgrade failed (need ${cost})")
            return False
        self.upgrades[track] = level + 1
        self._log_event(f"{track.replace('_', ' ').title()} upgraded to level {level + 1} (-${cost})")
        logger.info("Upgraded %s to level %d", track, level + 1)
        return True

    def _consume_stock(self, menu_key: str) -> bool:
        item = self.menu.get(menu_key, {})
        beans = int(item.get("beans", 0))
        milk = int(item.get("milk", 0))
        cakes = 1 if item.get("category") == "cake" else 0
        if self.stock["coffee_beans"] < beans or self.stock["milk"] < milk:
            return False
        if self.cake_stock.get(menu_key, 0) < cakes:
            return False
        self.stock["coffee_beans"] -= beans
        self.stock["milk"] -= milk
        if cakes:
            self.cake_stock[menu_key] -= cakes
        return True

    def _tick_deliveries(self, dt: float) -> None:
        pending: List[StockDelivery] = []
        for delivery in self.deliveries:
            delivery.remaining -= dt
            if delivery.remaining > 0:
                pending.append(delivery)
                continue
            bin_ = self.stock if delivery.kind in self.stock else self.cake_stock
            bin_[delivery.kind] = bin_.get(delivery.kind, 0) + delivery.quantity
            self._log_event(f"Delivery arrived: {delivery.quantity} {delivery.kind.replace('_', ' ')}")
        self.deliveries = pending

    def _tick_payroll(self, dt: float) -> None:
        self.payroll_timer += dt
        if self.payroll_timer < PAYROLL_INTERVAL:
            return
        self.payroll_timer -= PAYROLL_INTERVAL
        bill = self.wage_bill
        shortfall = self.ledger.pay_wages(bill)
        if shortfall > 0:
            self._log_event(f"Payroll short by ${shortfall:.2f}")
            logger.warning("Payroll short by %.2f", shortfall)
        else:
            self._log_event(f"Paid wages (-${bill:.2f})")

    # ------------------------------------------------------------------
    # External decisions
    # ------------------------------------------------------------------

    def _apply_price_action(self, action: Action) -> bool:
        if action.target is None or action.value is None:
            return False
        return self.adjust_price(action.target, action.value)

    def apply_action(self, action: Any) -> bool:
        parsed = parse_action(action)
        if parsed is None:
            return False
        return self._action_handlers[parsed.type](parsed)

    def apply_decision(self, payload: Any) -> int:
        """Apply one decision ``{"thought": str, "actions": [...]}``; returns actions applied."""
        if not isinstance(payload, dict):
            return 0
        thought = payload.get("thought")
        if isinstance(thought, str):
            cleaned = clean_narration_text(thought)
            if cleaned:
                self.narrate(cleaned, "strategy")
        return sum(1 for action in parse_actions(payload.get("actions")) if self.apply_action(action))

    # ------------------------------------------------------------------
    # Spawner
    # ------------------------------------------------------------------

    def _spawn_customer(self) -> Optional[Customer]:
        available = self.unlocked_menu()
        if not available:
            return None
        key = self.rng.choice(available)
        item = self.menu[key]
        order = Order(
            key=key,
            name=str(item["display_name"]),
            category=str(item["category"]),
            price=float(item["price"]),
            prep_time=float(item["prep_time"]),
        )
        ex, ey = ENTRY_POS
        customer = Customer(
            id=self._next_customer_id,
            x=ex,
            y=ey,
            target_x=ex,
            target_y=ey,
            order=order,
            wait_start=self.time,
        )
        _set_target(customer, queue_slot(len(self.line)))
        self._next_customer_id += 1
        self.customers[customer.id] = customer
        return customer

    def _tick_spawner(self, dt: float) -> None:
        self.spawn_timer += dt
        if self.spawn_timer < self.spawn_interval:
            return
        if len(self.customers) >= MAX_ACTIVE_CUSTOMERS:
            return
        self.spawn_timer = 0.0
        self._spawn_customer()

    # ------------------------------------------------------------------
    # Staff state machine
    # ------------------------------------------------------------------

    def _counter_customer(self) -> Optional[Customer]:
        for customer in self.customers.values():
            if customer.state == CustomerState.AT_COUNTER and customer.served_by is None:
                return customer
        return None

    def _release(self, barista: Barista) -> None:
        barista.serving_customer_id = None
        barista.state = StaffState.IDLE
        barista.timer = 0.0
        barista.prep_time = 0.0
        barista.prep_progress = 0.0
        _set_target(barista, home_spot(barista.station))

    def _staff_idle(self, barista: Barista, dt: float) -> None:
        _set_target(barista, home_spot(barista.station))
        move_toward(barista, STAFF_SPEED, dt)
        customer = self._counter_customer()
        if customer is None:
            return
        barista.serving_customer_id = customer.id
        customer.served_by = barista.id
        barista.state = StaffState.GOING_TO_COUNTER
        _set_target(barista, REGISTER_SPOT)

    def _staff_going_to_counter(self, barista: Barista, dt: float) -> None:
        if move_toward(barista, STAFF_SPEED, dt):
            barista.state = StaffState.TAKING_ORDER
            barista.timer = 0.0

    def _staff_taking_order(self, barista: Barista, dt: float) -> None:
        barista.timer += dt
        if barista.timer < self.take_order_time:
            return
        customer = self.customers.get(barista.serving_customer_id)
        if customer is None:
            self._release(barista)
            return
        if not self._consume_stock(customer.order.key):
            self._walk_out(customer)
            self._release(barista)
            return
        customer.state = CustomerState.WAITING_FOR_ITEM
        _set_target(customer, pickup_spot(barista.station))
        barista.prep_time = customer.order.prep_time * self.prep_multiplier
        barista.prep_progress = 0.0
        barista.timer = 0.0
        barista.state = StaffState.GOING_TO_STATION
        _set_target(barista, station_spot(barista.station))

    def _staff_going_to_station(self, barista: Barista, dt: float) -> None:
        if move_toward(barista, STAFF_SPEED, dt):
            barista.state = StaffState.PREPARING

    def _staff_preparing(self, barista: Barista, dt: float) -> None:
        barista.prep_progress = min(barista.prep_time, barista.prep_progress + dt)
        if barista.prep_progress >= barista.prep_time:
            barista.state = StaffState.GOING_TO_SERVE
            _set_target(barista, serve_spot(barista.station))

    def _staff_going_to_serve(self, barista: Barista, dt: float) -> None:
        if move_toward(barista, STAFF_SPEED, dt):
            barista.state = StaffState.SERVING
            barista.timer = 0.0

    def _staff_serving(self, barista: Barista, dt: float) -> None:
        barista.timer += dt
        if barista.timer < self.serve_time:
            return
        customer = self.customers.get(barista.serving_customer_id)
        if customer is not None:
            self._finalize_sale(customer)
        self._release(barista)

    def _finalize_sale(self, customer: Customer) -> None:
        if customer.total_wait is None:
            customer.total_wait = self.time - customer.wait_start
        order = customer.order
        quality = self.ledger.record_sale(order.price, order.category, customer.total_wait, self.quality_bonus)
        self.effects.spawn_money(customer.x, customer.y + 0.8, order.price)

        table = self.tables.free_index()
        if table < 0:
            customer.state = CustomerState.LEAVING
            _set_target(customer, EXIT_POS)
            return
        if quality >= TIP_MIN_QUALITY:
            customer.tip_amount = round(order.price * self.rng.uniform(TIP_RATE_MIN, TIP_RATE_MAX), 2)
        self.tables.occupy(table, customer.id)
        customer.table_index = table
        tx, ty = self.tables.position(table)
        _set_target(
            customer,
            (tx + self.rng.uniform(-TABLE_JITTER, TABLE_JITTER), ty + self.rng.uniform(-TABLE_JITTER, TABLE_JITTER)),
        )
        customer.sit_duration = self.rng.uniform(SIT_MIN, SIT_MAX)
        customer.state = CustomerState.GOING_TO_TABLE

    def _walk_out(self, customer: Customer) -> None:
        customer.state = CustomerState.LEAVING
        _set_target(customer, EXIT_POS)
        self.ledger.record_walkout()
        self._log_event(f"Customer #{customer.id} walked out: no stock for {customer.order.name}")
        logger.info("Customer %d walked out, %s out of stock", customer.id, customer.order.name)

    # ------------------------------------------------------------------
    # Customer state machine
    # ------------------------------------------------------------------

    def _counter_free(self) -> bool:
        return not any(c.state == CustomerState.AT_COUNTER for c in self.customers.values())

    def _customer_entering(self, customer: Customer, dt: float) -> None:
        _set_target(customer, queue_slot(len(self.line)))
        if move_toward(customer, CUSTOMER_SPEED, dt):
            self.line.append(customer.id)
            customer.state = CustomerState.QUEUING

    def _customer_queuing(self, customer: Customer, dt: float) -> None:
        rank = self.line.rank(customer.id)
        if rank == 0 and self._counter_free():
            _set_target(customer, ORDER_SPOT)
            if move_toward(customer, CUSTOMER_SPEED, dt):
                self.line.remove(customer.id)
                customer.state = CustomerState.AT_COUNTER
            return
        _set_target(customer, queue_slot(rank))
        move_toward(customer, CUSTOMER_SPEED, dt)

    def _customer_passive(self, customer: Customer, dt: float) -> None:
        return None

    def _customer_waiting_for_item(self, customer: Customer, dt: float) -> None:
        move_toward(customer, CUSTOMER_SPEED, dt)

    def _customer_going_to_table(self, customer: Customer, dt: float) -> None:
        if move_toward(customer, CUSTOMER_SPEED, dt):
            customer.state = CustomerState.SITTING
            customer.timer = 0.0

    def _customer_sitting(self, customer: Customer, dt: float) -> None:
        customer.timer += dt
        if customer.timer < customer.sit_duration:
            return
        if customer.tip_amount > 0:
            self.ledger.record_tip(customer.tip_amount)
            self.effects.spawn_money(customer.x, customer.y + 0.3, customer.tip_amount)
        self.tables.release(customer.table_index, customer.id)
        customer.table_index = -1
        customer.state = CustomerState.LEAVING
        _set_target(customer, EXIT_POS)

    def _customer_leaving(self, customer: Customer, dt: float) -> None:
        if move_toward(customer, CUSTOMER_SPEED, dt):
            self._remove_customer(customer)

    def _remove_customer(self, customer: Customer) -> None:
        self.customers.pop(customer.id, None)
        self.line.remove(customer.id)
        if customer.table_index >= 0:
            self.tables.release(customer.table_index, customer.id)
            customer.table_index = -1

    # ------------------------------------------------------------------
    # Day rollover
    # ------------------------------------------------------------------

    def _close_day(self, summary: DaySummary) -> None:
        self.narrate(
            f"Day {summary.day} closed with ${summary.revenue:,.2f} from {summary.orders} orders.",
            "reflection",
        )
        self._log_event(f"Day {self.ledger.day} begins")
        logger.info("Day %d closed: revenue=%.2f orders=%d", summary.day, summary.revenue, summary.orders)

    # ------------------------------------------------------------------
    # Main tick
    # ------------------------------------------------------------------

    def update(self, elapsed: float) -> float:
        """Frame entry point: clamp the wall-clock gap and advance by it."""
        dt = self.clock.frame_delta(elapsed)
        if dt > 0:
            self.tick(dt)
        return dt

    def tick(self, dt: float) -> None:
        if dt <= 0:
            return
        self.clock.advance(dt)
        self._tick_deliveries(dt)
        self._tick_spawner(dt)

        for barista in list(self.staff.values()):
            self._staff_handlers[barista.state](barista, dt)
        for customer in list(self.customers.values()):
            self._customer_handlers[customer.state](customer, dt)

        self.effects.tick(dt)
        self._tick_payroll(dt)

        summary = self.ledger.advance_day(dt)
        if summary is not None:
            self._close_day(summary)

        self.policy.tick(self, dt)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def stats(self) -> Dict[str, Any]:
        ledger = self.ledger
        return {
            "revenue": ledger.revenue,
            "daily_revenue": ledger.daily_revenue,
            "previous_day_revenue": ledger.previous_day_revenue,
            "funds": ledger.funds,
            "total_spend": ledger.total_spend,
            "coffee_sold": ledger.sold_by_category.get("coffee", 0),
            "cakes_sold": ledger.sold_by_category.get("cake", 0),
            "customers_served": ledger.customers_served,
            "orders_today": ledger.orders_today,
            "walkouts": ledger.walkouts,
            "tips": ledger.tips,
            "wages_paid": ledger.wages_paid,
            "profit_margin": ledger.profit_margin,
            "streak": ledger.streak,
            "best_streak": ledger.best_streak,
            "rating": ledger.rating,
            "avg_wait_time": round(ledger.average_wait, 2),
            "day": ledger.day,
            "baristas_count": self.staff_count,
            "queue_length": self.queue_length,
            "active_customers": len(self.customers),
            "tables": self.tables.owned,
            "max_tables": MAX_TABLES,
            "ambiance_level": self.ambiance_level,
        }

    def thoughts(self) -> List[Dict[str, Any]]:
        return self.narration.view(self.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baristas": [
                {
                    "id": b.id,
                    "station": b.station,
                    "x": b.x,
                    "y": b.y,
                    "state": b.state.value,
                    "progress": b.progress_fraction,
                    "serving_customer_id": b.serving_customer_id,
                }
                for b in self.staff.values()
            ],
            "customers": [
                {
                    "id": c.id,
                    "x": c.x,
                    "y": c.y,
                    "state": c.state.value,
                    "order": c.order.name,
                    "category": c.order.category,
                    "table_index": c.table_index,
                }
                for c in self.customers.values()
            ],
            "money_popups": [asdict(p) for p in self.effects.popups],
            "progress_indicators": [asdict(p) for p in self.effects.progress_indicators(self.staff.values())],
            "tables": list(self.tables.slots[: self.tables.owned]),
            "queue": self.line.ids(),
            "stock": dict(self.stock),
            "cake_stock": [
                {"name": self.menu[key]["display_name"], "stock": count, "unlocked": bool(self.menu[key]["unlocked"])}
                for key, count in self.cake_stock.items()
            ],
            "upgrades": dict(self.upgrades),
            "ambiance_level": self.ambiance_level,
            "pending_deliveries": [asdict(d) for d in self.deliveries],
            "menu": {key: dict(item) for key, item in self.menu.items()},
            "stats": self.stats(),
            "thoughts": self.thoughts(),
            "recent_events": list(self.event_log),
            "game_time": self.time,
        }
