import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Callable

from termcolor import cprint, colored

from .accounts import AccountManager, Role, STAFF_ROLES
from .allocator import OrderIdAllocator
from .database import DatabaseGateway, DatabaseError
from .helpers import safe_int, to_decimal, color_money

logger = logging.getLogger(__name__)

INITIAL_STATUS = "placed"
RECENT_ORDER_COUNT = 5
DONE_WORDS = ("", "done")
CANCEL_WORDS = ("cancel",)

class OrderAborted(Exception):
    """the customer walked away mid-order; nothing should be kept"""

class OrderFailure(Enum):
    """why place_order did not commit"""
    STORE_NOT_FOUND = "store not found"
    ABORTED = "order cancelled"
    DATABASE_ERROR = "database error"

# domain models
@dataclass
class OrderLine:
    """one item/quantity pair of an order"""
    item_name: str
    unit_price: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

@dataclass
class OrderResult:
    """outcome of a single place_order call"""
    order_id: int | None
    total: Decimal = Decimal("0")
    lines: list[OrderLine] = field(default_factory=list)
    failure: OrderFailure | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

class ItemEntrySource(ABC):
    """where the workflow gets item names and quantities from"""
    @abstractmethod
    def next_item(self) -> str | None:
        """next item name, or none when the customer is done"""

    @abstractmethod
    def quantity_for(self, item_name: str) -> str:
        """raw quantity text for item_name (validated by the caller)"""

class ConsoleItemEntry(ItemEntrySource):
    """prompt on stdin; blank/'done' finishes, 'cancel' or eof aborts"""
    def _read(self, prompt: str) -> str:
        try:
            raw = input(prompt).strip()
        except EOFError:
            raise OrderAborted("input closed") from None
        if raw.lower() in CANCEL_WORDS:
            raise OrderAborted("cancelled by customer")
        return raw

    def next_item(self) -> str | None:
        raw = self._read(colored("item name (blank or 'done' to finish): ", "magenta"))
        return None if raw.lower() in DONE_WORDS else raw

    def quantity_for(self, item_name: str) -> str:
        return self._read(colored(f"quantity of {item_name}: ", "magenta"))

class OrderWorkflow:
    """store check, header insert, line items, total write-back; one transaction"""
    def __init__(self, db: DatabaseGateway, allocator: OrderIdAllocator,
                 clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.allocator = allocator
        self.clock = clock

    def store_exists(self, store_id: int) -> bool:
        return self.db.query_one("SELECT storeID FROM Store WHERE storeID=?;", (store_id,)) is not None

    def find_item(self, name: str) -> tuple[str, Decimal] | None:
        """canonical item name and price for a case-insensitive name"""
        row = self.db.query_one(
            "SELECT itemName, price FROM Items WHERE lower(itemName)=lower(?);",
            (name,)
        )
        if row is None:
            return None
        return row[0], to_decimal(row[1])

    def _read_quantity(self, entries: ItemEntrySource, item_name: str) -> int:
        while True:
            qty = safe_int(entries.quantity_for(item_name), minimum=1)
            if qty is not None:
                return qty
            cprint("quantity must be a positive whole number", "red")

    def _add_line(self, order_id: int, lines: dict[str, OrderLine], entries: ItemEntrySource):
        name = entries.next_item()
        if name is None:
            return False
        item = self.find_item(name)
        if item is None:
            cprint(f"item not found: {name}", "red")
            return True
        item_name, price = item
        qty = self._read_quantity(entries, item_name)
        if item_name in lines:
            self.db.execute(
                "UPDATE ItemsInOrder SET quantity = quantity + ? WHERE orderID=? AND itemName=?;",
                (qty, order_id, item_name)
            )
            lines[item_name].quantity += qty
        else:
            self.db.execute(
                "INSERT INTO ItemsInOrder(orderID, itemName, quantity) VALUES(?,?,?);",
                (order_id, item_name, qty)
            )
            lines[item_name] = OrderLine(item_name, price, qty)
        cprint(f"added {qty} x {item_name} ({color_money(price * qty)})", "green")
        return True

    def place_order(self, login: str, store_id: str | int, entries: ItemEntrySource) -> OrderResult:
        """run the whole order; the allocator only moves once everything commits"""
        sid = safe_int(str(store_id))
        try:
            if sid is None or not self.store_exists(sid):
                return OrderResult(None, failure=OrderFailure.STORE_NOT_FOUND, detail=str(store_id))
        except DatabaseError as e:
            return OrderResult(None, failure=OrderFailure.DATABASE_ERROR, detail=str(e))

        order_id = self.allocator.next()
        lines: dict[str, OrderLine] = {}
        try:
            with self.db.transaction():
                self.db.execute(
                    """--sql
                    INSERT INTO FoodOrder(orderID, login, storeID, totalPrice, orderTimestamp, orderStatus)
                    VALUES(?,?,?,?,?,?);
                    """,
                    (order_id, login, sid, Decimal("0"),
                     self.clock().isoformat(sep=" ", timespec="seconds"), INITIAL_STATUS)
                )
                while self._add_line(order_id, lines, entries):
                    pass
                total = sum((line.subtotal for line in lines.values()), Decimal("0"))
                self.db.execute(
                    "UPDATE FoodOrder SET totalPrice=? WHERE orderID=?;",
                    (total, order_id)
                )
        except OrderAborted as e:
            logger.info("order %d aborted: %s", order_id, e)
            return OrderResult(order_id, failure=OrderFailure.ABORTED, detail=str(e))
        except DatabaseError as e:
            logger.error("order %d rolled back: %s", order_id, e)
            return OrderResult(order_id, failure=OrderFailure.DATABASE_ERROR, detail=str(e))

        self.allocator.advance()
        logger.info("order %d committed for %s: %d line(s), total %s", order_id, login, len(lines), total)
        return OrderResult(order_id, total, list(lines.values()))

# order management
class OrderManager:
    """interactive order commands"""
    def __init__(self, db: DatabaseGateway, account_manager: AccountManager, workflow: OrderWorkflow):
        self.db = db
        self.account_manager = account_manager
        self.workflow = workflow

    def place_order(self, store_id: str | None = None):
        """prompt for a store then items until done"""
        if store_id is None:
            store_id = input(colored("store id: ", "magenta")).strip()
        result = self.workflow.place_order(self.account_manager.current_login, store_id, ConsoleItemEntry())
        if result.failure is OrderFailure.STORE_NOT_FOUND:
            cprint(f"store not found: {result.detail}", "red"); return
        if result.failure is OrderFailure.ABORTED:
            cprint("order cancelled, nothing was saved", "yellow"); return
        if result.failure is OrderFailure.DATABASE_ERROR:
            cprint(f"order failed and was rolled back: {result.detail}", "red"); return
        if not result.lines:
            cprint(f"order #{result.order_id} has no items", "yellow")
        cprint(f"order #{result.order_id} placed, total {color_money(result.total)}", "green")

    def _order_ids(self, limit: int | None = None) -> list[str]:
        """order ids visible to the current user, newest first"""
        limit_clause = "LIMIT ?" if limit is not None else ""
        limit_params = (limit,) if limit is not None else ()
        if self.account_manager.has_role(*STAFF_ROLES):
            rows = self.db.query(
                f"SELECT orderID FROM FoodOrder ORDER BY orderTimestamp DESC, orderID DESC {limit_clause};",
                limit_params
            )
        else:
            rows = self.db.query(
                f"SELECT orderID FROM FoodOrder WHERE login=? ORDER BY orderTimestamp DESC, orderID DESC {limit_clause};",
                (self.account_manager.current_login, *limit_params)
            )
        return [r[0] for r in rows]

    def _print_ids(self, ids: list[str]):
        if not ids:
            cprint("no orders found", "red"); return
        for i, oid in enumerate(ids, start=1):
            print(f"{i}. order #{oid}")

    def view_all_orders(self):
        """list order ids (own orders for customers, all for staff)"""
        try:
            self._print_ids(self._order_ids())
        except DatabaseError as e:
            cprint(f"could not list orders: {e}", "red")

    def view_recent_orders(self):
        """list the most recent order ids"""
        try:
            self._print_ids(self._order_ids(RECENT_ORDER_COUNT))
        except DatabaseError as e:
            cprint(f"could not list orders: {e}", "red")

    def view_order_info(self, order_id: str | None = None):
        """show header and items of one order"""
        if order_id is None:
            order_id = input("order id: ").strip()
        oid = safe_int(order_id, minimum=1)
        if oid is None:
            cprint("invalid order id", "red"); return
        try:
            header = self.db.query_one(
                "SELECT orderID, login, storeID, totalPrice, orderTimestamp, orderStatus FROM FoodOrder WHERE orderID=?;",
                (oid,)
            )
            if header is None:
                cprint("order not found", "red"); return
            if not self.account_manager.has_role(*STAFF_ROLES) and header[1] != self.account_manager.current_login:
                cprint("that order is not yours", "red"); return
            items = self.db.query(
                "SELECT itemName, quantity FROM ItemsInOrder WHERE orderID=? ORDER BY itemName;",
                (oid,)
            )
        except DatabaseError as e:
            cprint(f"could not load order: {e}", "red"); return
        cprint(f"order #{header[0]}:", "green")
        print("\tcustomer:", header[1])
        print("\tstore:", header[2])
        print("\ttime:", header[4])
        print("\ttotal:", color_money(to_decimal(header[3])))
        print("\tstatus:", header[5].strip())
        print("\titems:", ", ".join(f"{q} x {n}" for n, q in items) or "none")

    def update_order_status(self, order_id: str | None = None):
        """set the free-text status of an order (drivers and managers)"""
        if not self.account_manager.require_role(Role.DRIVER, Role.MANAGER):
            return
        if order_id is None:
            order_id = input("order id: ").strip()
        oid = safe_int(order_id, minimum=1)
        if oid is None:
            cprint("invalid order id", "red"); return
        status = input("new status: ").strip()
        if not status:
            cprint("status cannot be empty", "red"); return
        try:
            count = self.db.execute("UPDATE FoodOrder SET orderStatus=? WHERE orderID=?;", (status, oid))
        except DatabaseError as e:
            cprint(f"update failed: {e}", "red"); return
        if count:
            logger.info("order %d status -> %r by %s", oid, status, self.account_manager.current_login)
            cprint(f"order #{oid} is now '{status}'", "green")
        else:
            cprint("order not found", "red")
