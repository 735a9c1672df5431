import io
import unittest
from unittest.mock import patch, MagicMock

from pizzastore.accounts import AccountManager, RoleGate, Role
from pizzastore.database import DatabaseError
from tests.support import make_db

class TestRoleGate(unittest.TestCase):

    def setUp(self):
        self.db = make_db()
        self.gate = RoleGate(self.db)

    def test_known_roles(self):
        self.assertIs(self.gate.role_of("alice"), Role.CUSTOMER)
        self.assertIs(self.gate.role_of("dan"), Role.DRIVER)
        self.assertIs(self.gate.role_of("mia"), Role.MANAGER)
        self.assertTrue(self.gate.is_role("mia", Role.MANAGER))
        self.assertFalse(self.gate.is_role("alice", Role.MANAGER))

    def test_char_padding_is_ignored(self):
        self.db.execute("UPDATE Users SET role=? WHERE login='dan';", ("driver              ",))
        self.assertIs(self.gate.role_of("dan"), Role.DRIVER)

    def test_no_substring_matching(self):
        self.db.execute("UPDATE Users SET role=? WHERE login='bob';", ("not a customer",))
        self.assertIs(self.gate.role_of("bob"), Role.UNKNOWN)

    def test_missing_user_is_unknown(self):
        self.assertIs(self.gate.role_of("ghost"), Role.UNKNOWN)
        self.assertIs(self.gate.role_of(None), Role.UNKNOWN)

    def test_lookup_failure_fails_closed(self):
        db = MagicMock()
        db.query_one.side_effect = DatabaseError("connection reset")
        self.assertIs(RoleGate(db).role_of("mia"), Role.UNKNOWN)

@patch("sys.stdout", new_callable=io.StringIO)
class TestAccountManager(unittest.TestCase):

    def setUp(self):
        self.db = make_db()
        self.accounts = AccountManager(self.db)

    def test_register_creates_customer(self, mock_stdout):
        self.accounts.register("carol", "hunter2", "555-0111")
        row = self.db.query_one("SELECT password, role, favoriteItems, phoneNum FROM Users WHERE login='carol';")
        self.assertEqual(row, ["hunter2", "customer", None, "555-0111"])
        self.assertIn("account created", mock_stdout.getvalue())

    def test_register_rejects_taken_login(self, mock_stdout):
        self.accounts.register("alice", "whatever", "1")
        self.assertIn("login already taken", mock_stdout.getvalue())

    def test_register_validation(self, mock_stdout):
        self.accounts.register("carol", "abc", "1")
        self.accounts.register("car ol", "abcd", "1")
        self.accounts.register("carol", "abcd", "")
        self.assertIsNone(self.db.query_one("SELECT 1 FROM Users WHERE login LIKE 'car%';"))

    def test_login_and_logout(self, mock_stdout):
        self.accounts.login("mia", "secret")
        self.assertEqual(self.accounts.current_login, "mia")
        self.assertIs(self.accounts.current_role, Role.MANAGER)
        self.accounts.logout()
        self.assertIsNone(self.accounts.current_login)
        self.assertIs(self.accounts.current_role, Role.UNKNOWN)

    def test_login_wrong_password(self, mock_stdout):
        self.accounts.login("mia", "nope")
        self.assertIsNone(self.accounts.current_login)
        self.assertIn("invalid login or password", mock_stdout.getvalue())

    def test_interactive_login(self, mock_stdout):
        with patch("builtins.input", side_effect=["alice", "secret"]):
            self.accounts.login()
        self.assertEqual(self.accounts.current_login, "alice")

    def test_require_role(self, mock_stdout):
        self.assertFalse(self.accounts.require_role(Role.MANAGER))
        self.accounts.login("dan", "secret")
        self.assertFalse(self.accounts.require_role(Role.MANAGER))
        self.assertTrue(self.accounts.require_role(Role.DRIVER, Role.MANAGER))
        self.assertIn("manager privileges required", mock_stdout.getvalue())

    def test_view_profile(self, mock_stdout):
        self.accounts.login("alice", "secret")
        self.accounts.view_profile()
        out = mock_stdout.getvalue()
        self.assertIn("555-0100", out)
        self.assertIn("customer", out)

    def test_update_profile(self, mock_stdout):
        self.accounts.login("alice", "secret")
        with patch("builtins.input", side_effect=["favorites", "Pepperoni, Coke"]):
            self.accounts.update_profile()
        with patch("builtins.input", side_effect=["password", "xy"]):
            self.accounts.update_profile()
        row = self.db.query_one("SELECT favoriteItems, password FROM Users WHERE login='alice';")
        self.assertEqual(row, ["Pepperoni, Coke", "secret"])

    def test_update_profile_rejects_unknown_field(self, mock_stdout):
        self.accounts.login("alice", "secret")
        with patch("builtins.input", side_effect=["role"]):
            self.accounts.update_profile()
        self.assertIs(self.accounts.current_role, Role.CUSTOMER)
        self.assertIn("invalid field", mock_stdout.getvalue())

if __name__ == "__main__":
    unittest.main()
