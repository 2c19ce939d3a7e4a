"""Tests for order number generation."""
from __future__ import annotations

import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock

from takeaway.services.order_numbering import (
    OrderNumberSequencer,
    format_order_number,
    next_order_number,
)


def _run(coro):
    return asyncio.run(coro)


class TestNextOrderNumber(unittest.TestCase):
    def test_first_order(self):
        self.assertEqual(next_order_number(None, "FTP"), "FTP-0001")

    def test_increments_trailing_counter(self):
        self.assertEqual(next_order_number("FTP-0041", "FTP"), "FTP-0042")

    def test_grows_past_four_digits(self):
        self.assertEqual(next_order_number("FTP-9999", "FTP"), "FTP-10000")

    def test_uses_current_prefix(self):
        self.assertEqual(next_order_number("OLD-0007", "XMS"), "XMS-0008")

    def test_unparseable_previous_restarts_with_warning(self):
        with self.assertLogs("takeaway.services.order_numbering", level="WARNING") as logs:
            self.assertEqual(next_order_number("garbage", "FTP"), "FTP-0001")
        self.assertIn("garbage", logs.output[0])

    def test_format_pads_to_four(self):
        self.assertEqual(format_order_number("FTP", 7), "FTP-0007")


class TestSequencer(unittest.TestCase):
    def test_reads_latest_number_from_repo(self):
        seq = OrderNumberSequencer(MagicMock(), prefix="FTP")
        seq._repo.latest_order_number = AsyncMock(return_value="FTP-0012")

        self.assertEqual(_run(seq.next_number()), "FTP-0013")
        seq._repo.latest_order_number.assert_awaited_once()

    def test_empty_table_starts_at_one(self):
        seq = OrderNumberSequencer(MagicMock(), prefix="FTP")
        seq._repo.latest_order_number = AsyncMock(return_value=None)

        self.assertEqual(_run(seq.next_number()), "FTP-0001")


if __name__ == "__main__":
    unittest.main()
