import logging

from .database import DatabaseGateway, DatabaseError

logger = logging.getLogger(__name__)

class AllocatorError(Exception):
    """order ids cannot be handed out safely"""

class OrderIdAllocator:
    """hand out increasing order ids from an in-memory counter

    seeded once from MAX(orderID). only valid for a single session writing
    to the database; another writer will make the counter drift.
    """
    def __init__(self, db: DatabaseGateway):
        self.db = db
        self._next_id: int | None = None

    def initialize(self):
        """seed the counter from the highest stored order id"""
        try:
            row = self.db.query_one("SELECT MAX(orderID) FROM FoodOrder;")
        except DatabaseError as e:
            raise AllocatorError(f"could not read current max order id: {e}") from e
        current_max = int(row[0]) if row and row[0] is not None else 0
        self._next_id = current_max + 1
        logger.info("order id allocator seeded at %d", self._next_id)

    def next(self) -> int:
        """id the next committed order will get (does not advance)"""
        if self._next_id is None:
            raise AllocatorError("allocator used before initialize()")
        return self._next_id

    def advance(self):
        """call once the order using next() has committed"""
        self._next_id = self.next() + 1
