"""Tests for currency display helpers."""

import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", ".."))

from farmhand.core.currencies import (
    format_currency_label,
    format_price,
    get_currency_by_code,
    get_currency_symbol,
)


class TestCurrencies(unittest.TestCase):
    def test_lookup(self):
        self.assertEqual(get_currency_by_code("KES")["symbol"], "KSh")
        self.assertIsNone(get_currency_by_code("EUR"))

    def test_label(self):
        self.assertEqual(format_currency_label("NGN"), "Nigerian Naira (NGN)")
        self.assertEqual(format_currency_label("EUR"), "EUR")
        self.assertEqual(format_currency_label(None), "—")

    def test_format_price(self):
        self.assertEqual(format_price(1234.5, "NGN"), "₦1,234.50")
        self.assertEqual(format_price("99"), "$99.00")
        self.assertEqual(format_price(10, "EUR"), "$10.00")
        self.assertEqual(format_price("abc", "USD"), "—")
        self.assertEqual(format_price(float("nan")), "—")

    def test_symbol(self):
        self.assertEqual(get_currency_symbol("ZAR"), "R")
        self.assertEqual(get_currency_symbol("???"), "—")


if __name__ == "__main__":
    unittest.main()
