import unittest
from decimal import Decimal

from pizzastore.helpers import safe_int, parse_price, MAX_SQL_INT

class TestSafeInt(unittest.TestCase):

    def test_plain_numbers(self):
        self.assertEqual(safe_int(" 12 "), 12)
        self.assertEqual(safe_int("-4"), -4)
        self.assertIsNone(safe_int("-4", minimum=1))
        self.assertIsNone(safe_int(None))

    def test_only_ascii_digits(self):
        for raw in ("1_0", "+3", "\u0663", "1e3", "", "-", "3.0"):
            self.assertIsNone(safe_int(raw), raw)

    def test_upper_bound(self):
        self.assertEqual(safe_int(str(MAX_SQL_INT)), MAX_SQL_INT)
        self.assertIsNone(safe_int(str(MAX_SQL_INT + 1)))
        self.assertIsNone(safe_int("99999999999999999999"))
        self.assertEqual(safe_int("99999999999999999999", maximum=None), 99999999999999999999)

class TestParsePrice(unittest.TestCase):

    def test_prices(self):
        self.assertEqual(parse_price("$6.5"), Decimal("6.50"))
        self.assertIsNone(parse_price("0"))
        self.assertIsNone(parse_price("NaN"))
        self.assertIsNone(parse_price("cheap"))

if __name__ == "__main__":
    unittest.main()
