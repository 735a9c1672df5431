import io
import unittest
from decimal import Decimal
from unittest.mock import patch

from pizzastore.accounts import AccountManager
from pizzastore.menu import MenuManager
from tests.support import make_db

@patch("sys.stdout", new_callable=io.StringIO)
class TestMenuManager(unittest.TestCase):

    def setUp(self):
        self.db = make_db()
        self.accounts = AccountManager(self.db)
        self.menu = MenuManager(self.db, self.accounts)

    def names(self, rows):
        return [r[0] for r in rows]

    def test_fetch_menu_filters(self, mock_stdout):
        self.assertEqual(self.names(self.menu.fetch_menu("DRINK")), ["Coke"])
        self.assertEqual(self.names(self.menu.fetch_menu(max_price=Decimal("3.00"))), ["Coke", "Mint"])
        self.assertEqual(self.names(self.menu.fetch_menu(sort="desc")), ["Pepperoni", "Coke", "Mint"])
        self.assertEqual(self.names(self.menu.fetch_menu(sort="asc")), ["Mint", "Coke", "Pepperoni"])

    def test_view_menu_rejects_bad_input(self, mock_stdout):
        with patch("builtins.input", side_effect=["", "cheap", ""]):
            self.menu.view_menu()
        with patch("builtins.input", side_effect=["", "", "sideways"]):
            self.menu.view_menu()
        out = mock_stdout.getvalue()
        self.assertIn("invalid price limit", out)
        self.assertIn("sort must be asc or desc", out)

    def test_view_menu_prints_items(self, mock_stdout):
        with patch("builtins.input", side_effect=["entree", "20", "asc"]):
            self.menu.view_menu()
        out = mock_stdout.getvalue()
        self.assertIn("Pepperoni", out)
        self.assertIn("$12.00", out)
        self.assertNotIn("Coke", out)

    def test_view_stores(self, mock_stdout):
        self.menu.view_stores()
        self.assertIn("123 Main St, Riverside, CA", mock_stdout.getvalue())

    def test_update_menu_requires_manager(self, mock_stdout):
        self.accounts.current_login = "dan"
        self.menu.update_menu("Coke")
        self.assertIn("manager privileges required", mock_stdout.getvalue())

    def test_manager_adds_item(self, mock_stdout):
        self.accounts.current_login = "mia"
        with patch("builtins.input", side_effect=["$6.5", "side", "potato", ""]):
            self.menu.update_menu("Fries")
        self.assertEqual(
            self.db.query_one("SELECT price, typeOfItem, description FROM Items WHERE itemName='Fries';"),
            ["6.5", "side", None]
        )

    def test_manager_edits_price(self, mock_stdout):
        self.accounts.current_login = "mia"
        with patch("builtins.input", side_effect=["price", "3.25"]):
            self.menu.update_menu("coke")
        with patch("builtins.input", side_effect=["price", "-1"]):
            self.menu.update_menu("coke")
        self.assertEqual(self.db.query_one("SELECT price FROM Items WHERE itemName='Coke';"), ["3.25"])
        self.assertIn("invalid price", mock_stdout.getvalue())

    def test_manager_updates_user_role(self, mock_stdout):
        self.accounts.current_login = "mia"
        with patch("builtins.input", side_effect=["role", "Driver"]):
            self.menu.update_user("bob")
        with patch("builtins.input", side_effect=["role", "superuser"]):
            self.menu.update_user("alice")
        roles = self.db.query("SELECT login, role FROM Users WHERE login IN ('alice', 'bob') ORDER BY login;")
        self.assertEqual(roles, [["alice", "customer"], ["bob", "driver"]])
        self.assertIn("role must be one of customer, driver, manager", mock_stdout.getvalue())

    def test_update_unknown_user(self, mock_stdout):
        self.accounts.current_login = "mia"
        with patch("builtins.input", side_effect=["phone", "555-0000"]):
            self.menu.update_user("ghost")
        self.assertIn("user not found", mock_stdout.getvalue())

if __name__ == "__main__":
    unittest.main()
