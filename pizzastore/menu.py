import logging

from termcolor import cprint, colored

from .accounts import AccountManager, Role, ASSIGNABLE_ROLES, MIN_PASSWORD_LENGTH
from .database import DatabaseGateway, DatabaseError
from .helpers import parse_price, to_decimal, color_money

logger = logging.getLogger(__name__)

SORT_ORDERS = {"asc": "ASC", "desc": "DESC"}
ITEM_FIELDS = {"price": "price", "ingredients": "ingredients", "type": "typeOfItem", "description": "description"}
USER_FIELDS = {"role": "role", "password": "password", "phone": "phoneNum"}

class MenuManager:
    """menu browsing, store listing and manager-only edits"""
    def __init__(self, db: DatabaseGateway, account_manager: AccountManager):
        self.db = db
        self.account_manager = account_manager

    def fetch_menu(self, item_type: str = "", max_price=None, sort: str = ""):
        """menu rows filtered by type / price, optionally sorted by price"""
        clauses, params = [], []
        if item_type:
            clauses.append("lower(typeOfItem)=lower(?)")
            params.append(item_type)
        if max_price is not None:
            clauses.append("price <= ?")
            params.append(max_price)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        order = f"ORDER BY price {SORT_ORDERS[sort]}, itemName" if sort in SORT_ORDERS else "ORDER BY typeOfItem, itemName"
        return self.db.query(
            f"SELECT itemName, ingredients, typeOfItem, price, description FROM Items {where} {order};",
            params
        )

    def view_menu(self):
        """print the menu with optional filters"""
        item_type = input("item type? (blank for all): ").strip()
        raw_price = input("price limit? (blank for none): ").strip()
        max_price = None
        if raw_price:
            max_price = parse_price(raw_price)
            if max_price is None:
                cprint("invalid price limit", "red"); return
        sort = input("sort by price asc or desc? (blank for none): ").strip().lower()
        if sort and sort not in SORT_ORDERS:
            cprint("sort must be asc or desc", "red"); return
        try:
            rows = self.fetch_menu(item_type, max_price, sort)
        except DatabaseError as e:
            cprint(f"could not load menu: {e}", "red"); return
        if not rows:
            cprint("no matching items", "red"); return
        cprint("menu", None, attrs=["bold"])
        for name, ingredients, kind, price, description in rows:
            cprint(f"\n{name}: {color_money(to_decimal(price))}", "green", attrs=["bold"])
            print("\ttype:", kind)
            print("\tingredients:", ingredients)
            if description:
                print("\t" + description)

    def view_stores(self):
        """print every store"""
        try:
            rows = self.db.query(
                "SELECT storeID, address, city, state, isOpen, reviewScore FROM Store ORDER BY storeID;"
            )
        except DatabaseError as e:
            cprint(f"could not load stores: {e}", "red"); return
        if not rows:
            cprint("no stores", "red"); return
        for store_id, address, city, state, is_open, score in rows:
            cprint(f"store #{store_id}", "green")
            print(f"\taddress: {address}, {city}, {state}")
            print("\topen:", is_open)
            print("\treview score:", score or "n/a")

    def update_menu(self, item_name: str | None = None):
        """add a new item or edit one field of an existing item (managers)"""
        if not self.account_manager.require_role(Role.MANAGER):
            return
        if item_name is None:
            item_name = input("item name: ").strip()
        if not item_name:
            cprint("item name required", "red"); return
        try:
            existing = self.db.query_one("SELECT itemName FROM Items WHERE lower(itemName)=lower(?);", (item_name,))
            if existing is None:
                self._add_item(item_name)
            else:
                self._edit_item(existing[0])
        except DatabaseError as e:
            cprint(f"menu update failed: {e}", "red")

    def _add_item(self, item_name: str):
        cprint(f"'{item_name}' is not on the menu, adding it", "yellow")
        price = parse_price(input("price: "))
        if price is None:
            cprint("invalid price", "red"); return
        kind = input("type of item: ").strip()
        ingredients = input("ingredients: ").strip()
        if not kind or not ingredients:
            cprint("type and ingredients are required", "red"); return
        description = input("description (optional): ").strip() or None
        self.db.execute(
            "INSERT INTO Items(itemName, ingredients, typeOfItem, price, description) VALUES(?,?,?,?,?);",
            (item_name, ingredients, kind, price, description)
        )
        logger.info("menu item %r added at %s", item_name, price)
        cprint("menu item added", "green")

    def _edit_item(self, item_name: str):
        choice = input("update which field? (price/ingredients/type/description): ").strip().lower()
        column = ITEM_FIELDS.get(choice)
        if column is None:
            cprint("invalid field", "red"); return
        raw = input(f"new {choice}: ").strip()
        value = raw
        if choice == "price":
            value = parse_price(raw)
            if value is None:
                cprint("invalid price", "red"); return
        elif not raw and choice != "description":
            cprint(f"{choice} cannot be empty", "red"); return
        self.db.execute(f"UPDATE Items SET {column}=? WHERE itemName=?;", (value or None, item_name))
        logger.info("menu item %r: %s updated", item_name, choice)
        cprint(f"{item_name} {choice} updated", "green")

    def update_user(self, login: str | None = None):
        """change another user's role, password or phone number (managers)"""
        if not self.account_manager.require_role(Role.MANAGER):
            return
        if login is None:
            login = input("login of user to update: ").strip()
        choice = input("update which field? (role/password/phone): ").strip().lower()
        column = USER_FIELDS.get(choice)
        if column is None:
            cprint("invalid field", "red"); return
        value = input(f"new {choice}: ").strip()
        if choice == "role":
            role = Role.parse(value)
            if role not in ASSIGNABLE_ROLES:
                cprint(f"role must be one of {', '.join(r.value for r in ASSIGNABLE_ROLES)}", "red"); return
            value = role.value
        elif choice == "password" and len(value) < MIN_PASSWORD_LENGTH:
            cprint(f"password too short (min {MIN_PASSWORD_LENGTH})", "red"); return
        elif not value:
            cprint(f"{choice} cannot be empty", "red"); return
        try:
            count = self.db.execute(f"UPDATE Users SET {column}=? WHERE login=?;", (value, login))
        except DatabaseError as e:
            cprint(f"update failed: {e}", "red"); return
        if count:
            logger.info("user %r: %s updated by %s", login, choice, self.account_manager.current_login)
            cprint(f"{login} {choice} updated", "green")
        else:
            cprint(f"user not found: {colored(login, 'yellow')}", "red")
