from pizzastore.database import SqliteGateway
from pizzastore.orders import ItemEntrySource, OrderAborted

def make_db() -> SqliteGateway:
    """in-memory store with store 5, a small menu and one user per role"""
    db = SqliteGateway(":memory:", seed=False)
    db.execute(
        "INSERT INTO Store(storeID, address, city, state, isOpen, reviewScore) VALUES(?,?,?,?,?,?);",
        (5, "123 Main St", "Riverside", "CA", "yes", 4.0)
    )
    for name, kind, price in [
        ("Pepperoni", "entree", "12.00"),
        ("Coke", "drink", "2.50"),
        ("Mint", "side", "0.10"),
    ]:
        db.execute(
            "INSERT INTO Items(itemName, ingredients, typeOfItem, price, description) VALUES(?,?,?,?,?);",
            (name, "stuff", kind, price, None)
        )
    for login, role in [("alice", "customer"), ("bob", "customer"), ("dan", "driver"), ("mia", "manager")]:
        db.execute(
            "INSERT INTO Users(login, password, role, favoriteItems, phoneNum) VALUES(?,?,?,NULL,?);",
            (login, "secret", role, "555-0100")
        )
    return db

def count(db, table: str) -> int:
    return int(db.query_one(f"SELECT COUNT(*) FROM {table};")[0])

class ScriptedEntry(ItemEntrySource):
    """canned item entry: [(name, [quantity, ...]), ...]; abort=True cancels at the end"""
    def __init__(self, script, abort: bool = False):
        self.script = list(script)
        self.abort = abort
        self._quantities: list[str] = []
        self.quantity_prompts = 0

    def next_item(self):
        if not self.script:
            if self.abort:
                raise OrderAborted("test abort")
            return None
        name, quantities = self.script.pop(0)
        self._quantities = list(quantities)
        return name

    def quantity_for(self, item_name):
        self.quantity_prompts += 1
        return self._quantities.pop(0)
