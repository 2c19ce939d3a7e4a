"""Tests for environment-driven configuration."""
from __future__ import annotations

import os
import unittest
from datetime import timezone
from unittest.mock import patch

from takeaway.config import AppSettings, PostgresConfig, load_app_settings, load_postgres_config


class TestAppSettings(unittest.TestCase):
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = load_app_settings()
        self.assertEqual(settings.order_number_prefix, "FTP")
        self.assertEqual(settings.timezone_name, "UTC")
        self.assertIs(settings.tz, timezone.utc)
        self.assertEqual(settings.currency, "AED")
        self.assertEqual(settings.trend_days, 30)

    def test_reads_env(self):
        env = {
            "ORDER_NUMBER_PREFIX": "xms",
            "APP_TIMEZONE": "Asia/Dubai",
            "CURRENCY": "gbp",
            "DASHBOARD_TOP_ITEMS": "5",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = load_app_settings()
        self.assertEqual(settings.order_number_prefix, "XMS")
        self.assertEqual(settings.currency, "GBP")
        self.assertEqual(settings.top_items_limit, 5)
        self.assertEqual(str(settings.tz), "Asia/Dubai")

    def test_overrides_win(self):
        with patch.dict(os.environ, {"ORDER_NUMBER_PREFIX": "AAA"}, clear=True):
            self.assertEqual(load_app_settings(order_number_prefix="BBB").order_number_prefix, "BBB")

    def test_invalid_values(self):
        for kwargs in (
            {"order_number_prefix": "ftp-"},
            {"timezone_name": "Mars/Olympus"},
            {"currency": "DIRHAM"},
            {"trend_days": 0},
        ):
            with self.subTest(**kwargs), self.assertRaises(ValueError):
                AppSettings(**kwargs)


class TestPostgresConfig(unittest.TestCase):
    def test_from_env(self):
        env = {"DATABASE_URL": "postgresql://u:p@db/orders", "DB_POOL_SIZE": "3", "DB_ECHO": "yes"}
        with patch.dict(os.environ, env, clear=True):
            config = load_postgres_config()
        self.assertEqual(config.url, "postgresql://u:p@db/orders")
        self.assertEqual(config.pool_size, 3)
        self.assertTrue(config.echo)

    def test_rejects_foreign_scheme(self):
        with self.assertRaises(ValueError):
            PostgresConfig(url="mysql://localhost/orders")

    def test_rejects_bad_pool(self):
        with self.assertRaises(ValueError):
            PostgresConfig(url="postgresql://localhost/orders", pool_size=0)


if __name__ == "__main__":
    unittest.main()
