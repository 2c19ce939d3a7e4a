"""Tests for money arithmetic and payment-status derivation."""
from __future__ import annotations

import unittest
from decimal import Decimal
from types import SimpleNamespace

from takeaway.core.exceptions import ValidationError
from takeaway.domain.pricing import (
    MAX_MONEY,
    ZERO,
    derive_payment_status,
    ensure_storable,
    line_total,
    order_total,
    to_money,
)
from takeaway.domain.types import PaymentStatus


class TestToMoney(unittest.TestCase):
    def test_rounds_half_up_to_cents(self):
        self.assertEqual(to_money("10.005"), Decimal("10.01"))
        self.assertEqual(to_money(550), Decimal("550.00"))
        self.assertEqual(to_money(0.1), Decimal("0.10"))

    def test_rejects_non_numbers(self):
        for bad in (None, True, "abc", "NaN", "Infinity"):
            with self.subTest(value=bad), self.assertRaises(ValidationError) as ctx:
                to_money(bad, "price")
            self.assertEqual(ctx.exception.details["field"], "price")

    def test_bounded_by_money_column(self):
        self.assertEqual(to_money("99999999.99"), MAX_MONEY)
        for bad in ("100000000", "-100000000", "99999999.995", "1e40"):
            with self.subTest(value=bad), self.assertRaises(ValidationError) as ctx:
                to_money(bad, "amount")
            self.assertEqual(ctx.exception.details["field"], "amount")

    def test_ensure_storable(self):
        self.assertEqual(ensure_storable(Decimal("12.50")), Decimal("12.50"))
        with self.assertRaises(ValidationError):
            ensure_storable(MAX_MONEY + Decimal("0.01"), "total_paid")


class TestTotals(unittest.TestCase):
    def test_line_total(self):
        self.assertEqual(line_total(3, Decimal("45.50")), Decimal("136.50"))

    def test_order_total_sums_line_totals(self):
        items = [
            SimpleNamespace(total_price=Decimal("550.00")),
            SimpleNamespace(total_price=Decimal("130.00")),
        ]
        self.assertEqual(order_total(items), Decimal("680.00"))

    def test_order_total_of_nothing_is_zero(self):
        self.assertEqual(order_total([]), ZERO)


class TestDerivePaymentStatus(unittest.TestCase):
    def test_pending_when_nothing_paid(self):
        self.assertIs(derive_payment_status(ZERO, Decimal("550")), PaymentStatus.PENDING)

    def test_partial(self):
        self.assertIs(derive_payment_status(Decimal("300"), Decimal("550")), PaymentStatus.PARTIAL)

    def test_paid_when_covered_or_overpaid(self):
        self.assertIs(derive_payment_status(Decimal("550"), Decimal("550")), PaymentStatus.PAID)
        self.assertIs(derive_payment_status(Decimal("600"), Decimal("550")), PaymentStatus.PAID)

    def test_zero_total_counts_as_paid(self):
        self.assertIs(derive_payment_status(ZERO, ZERO), PaymentStatus.PAID)


if __name__ == "__main__":
    unittest.main()
