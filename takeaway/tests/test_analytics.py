"""Tests for dashboard, daily and range sales aggregation."""
from __future__ import annotations

import asyncio
import unittest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4
from zoneinfo import ZoneInfo

from takeaway.config import AppSettings
from takeaway.core.exceptions import ValidationError
from takeaway.services.analytics_service import (
    AnalyticsService,
    build_daily,
    build_dashboard,
    build_range,
    top_items,
)

DUBAI = ZoneInfo("Asia/Dubai")
TODAY = date(2025, 12, 20)


def _run(coro):
    return asyncio.run(coro)


def _item(name, quantity, price, serving_size="Regular"):
    price = Decimal(price)
    return SimpleNamespace(name=name, serving_size=serving_size, quantity=quantity,
                           price=price, total_price=price * quantity)


def _order(
    *,
    items,
    status="pending",
    paid="0",
    collection_date=TODAY,
    collection_time="12:00",
    created_at=None,
    deleted=False,
):
    total = sum((i.total_price for i in items), Decimal("0"))
    return SimpleNamespace(
        id=uuid4(),
        order_number=f"FTP-{uuid4().hex[:4]}",
        guest_name="Guest",
        items=items,
        total_amount=total,
        total_paid=Decimal(paid),
        status=status,
        collection_date=collection_date,
        collection_time=collection_time,
        created_at=created_at or datetime(2025, 12, 20, 8, 0, tzinfo=timezone.utc),
        is_deleted=deleted,
    )


class TestTopItems(unittest.TestCase):
    def test_ranked_by_quantity_ties_keep_first_seen(self):
        orders = [
            _order(items=[_item("Gravy", 2, "45"), _item("Turkey", 1, "550")]),
            _order(items=[_item("Stuffing", 2, "30"), _item("Turkey", 4, "550")]),
        ]
        ranked = top_items(orders, 10)
        self.assertEqual([(s.name, s.quantity) for s in ranked], [("Turkey", 5), ("Gravy", 2), ("Stuffing", 2)])
        self.assertEqual(ranked[0].revenue, Decimal("2750"))

    def test_serving_sizes_are_separate(self):
        orders = [_order(items=[_item("Gravy", 1, "45", "Small"), _item("Gravy", 1, "60", "Large")])]
        self.assertEqual(len(top_items(orders, 10)), 2)

    def test_limit(self):
        orders = [_order(items=[_item(f"Dish {n}", n, "1") for n in range(1, 6)])]
        self.assertEqual([s.name for s in top_items(orders, 2)], ["Dish 5", "Dish 4"])


class TestDashboard(unittest.TestCase):
    def test_totals_and_status_counts(self):
        orders = [
            _order(items=[_item("Turkey", 1, "550")], status="confirmed", paid="300"),
            _order(items=[_item("Gravy", 2, "45")], status="collected", paid="90"),
            _order(items=[_item("Ham", 1, "490")], status="pending", deleted=True),
        ]
        stats = build_dashboard(orders, today=TODAY, tz=timezone.utc, total_guests=4)

        self.assertEqual(stats.total_orders, 2)
        self.assertEqual(stats.total_revenue, Decimal("640"))
        self.assertEqual(stats.total_collected, Decimal("390"))
        self.assertEqual(stats.average_order_value, Decimal("320.00"))
        self.assertEqual(stats.total_guests, 4)
        self.assertEqual(stats.status_counts["confirmed"], 1)
        self.assertEqual(stats.status_counts["collected"], 1)
        self.assertEqual(stats.status_counts["cancelled"], 0)
        self.assertEqual(stats.status_counts["pending"], 0)
        self.assertEqual([s.name for s in stats.top_items], ["Gravy", "Turkey"])

    def test_average_rounds_half_up(self):
        orders = [_order(items=[_item("A", 1, "0.01")]), _order(items=[_item("B", 1, "0.02")])]
        stats = build_dashboard(orders, today=TODAY, tz=timezone.utc, total_guests=0)
        self.assertEqual(stats.average_order_value, Decimal("0.02"))

    def test_empty(self):
        stats = build_dashboard([], today=TODAY, tz=timezone.utc, total_guests=0, trend_days=7)
        self.assertEqual(stats.total_orders, 0)
        self.assertEqual(stats.average_order_value, Decimal("0.00"))
        self.assertEqual(len(stats.trend), 7)
        self.assertEqual(stats.top_items, [])
        self.assertEqual(stats.upcoming, [])

    def test_today_uses_business_time_zone(self):
        # 21:30 UTC on the 19th is already the 20th in Dubai (UTC+4)
        late = _order(items=[_item("Turkey", 1, "550")], created_at=datetime(2025, 12, 19, 21, 30, tzinfo=timezone.utc))
        stats_utc = build_dashboard([late], today=TODAY, tz=timezone.utc, total_guests=0)
        stats_dxb = build_dashboard([late], today=TODAY, tz=DUBAI, total_guests=0)

        self.assertEqual(stats_utc.today_orders, 0)
        self.assertEqual(stats_dxb.today_orders, 1)
        self.assertEqual(stats_dxb.today_revenue, Decimal("550"))

    def test_trend_is_oldest_first_ending_today(self):
        yesterday = datetime(2025, 12, 19, 10, 0, tzinfo=timezone.utc)
        orders = [_order(items=[_item("Turkey", 1, "550")], created_at=yesterday)]
        stats = build_dashboard(orders, today=TODAY, tz=timezone.utc, total_guests=0, trend_days=3)

        self.assertEqual([p.day for p in stats.trend], [date(2025, 12, 18), date(2025, 12, 19), TODAY])
        self.assertEqual(stats.trend[1].orders, 1)
        self.assertEqual(stats.trend[1].revenue, Decimal("550"))

    def test_upcoming_collections(self):
        soon = _order(items=[_item("A", 1, "1")], status="confirmed", collection_date=TODAY + timedelta(days=1),
                      collection_time="09:00")
        later_same_day = _order(items=[_item("A", 1, "1")], status="pending",
                                collection_date=TODAY + timedelta(days=1), collection_time="15:00")
        today_order = _order(items=[_item("A", 1, "1")], status="pending", collection_date=TODAY,
                             collection_time="18:00")
        collected = _order(items=[_item("A", 1, "1")], status="collected", collection_date=TODAY)
        past = _order(items=[_item("A", 1, "1")], status="pending", collection_date=TODAY - timedelta(days=1))
        far = _order(items=[_item("A", 1, "1")], status="pending", collection_date=TODAY + timedelta(days=30))

        stats = build_dashboard(
            [later_same_day, far, collected, soon, past, today_order],
            today=TODAY, tz=timezone.utc, total_guests=0, upcoming_window_days=7,
        )
        self.assertEqual(
            [u.order_id for u in stats.upcoming],
            [today_order.id, soon.id, later_same_day.id],
        )


class TestDaily(unittest.TestCase):
    def test_daily_revenue_is_collected_money(self):
        orders = [
            _order(items=[_item("Turkey", 1, "550")], status="confirmed", paid="300"),
            _order(items=[_item("Gravy", 2, "45")], status="collected", paid="90"),
            _order(items=[_item("Ham", 1, "490")], status="pending", collection_date=TODAY + timedelta(days=1)),
        ]
        daily = build_daily(orders, TODAY)

        self.assertEqual(daily.total_orders, 2)
        self.assertEqual(daily.revenue, Decimal("390"))
        self.assertEqual(daily.status_counts, {"confirmed": 1, "collected": 1})
        self.assertEqual(daily.confirmed_orders, 1)
        self.assertEqual(daily.pending_orders, 0)
        self.assertEqual(daily.collected_orders, 1)
        self.assertEqual([i.name for i in daily.items], ["Turkey", "Gravy"])


class TestRange(unittest.TestCase):
    def test_only_days_with_orders_are_listed(self):
        start, end = date(2025, 12, 22), date(2025, 12, 24)
        orders = [
            _order(items=[_item("Turkey", 1, "550")], paid="550", collection_date=start),
            _order(items=[_item("Gravy", 1, "45")], paid="20", collection_date=start),
            _order(items=[_item("Ham", 1, "490")], paid="100", collection_date=end),
            _order(items=[_item("Pie", 1, "150")], paid="150", collection_date=date(2025, 12, 25)),
        ]
        result = build_range(orders, start, end)

        self.assertEqual(result.total_orders, 3)
        self.assertEqual(result.revenue, Decimal("670"))
        self.assertEqual([(d.day, d.orders, d.revenue) for d in result.daily], [
            (start, 2, Decimal("570")),
            (end, 1, Decimal("100")),
        ])

    def test_start_after_end_rejected(self):
        with self.assertRaises(ValidationError):
            build_range([], date(2025, 12, 24), date(2025, 12, 22))

    def test_missing_bound_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            build_range([], date(2025, 12, 24), None)
        self.assertEqual(ctx.exception.details["field"], "end_date")


class TestAnalyticsService(unittest.TestCase):
    def _service(self, orders):
        svc = AnalyticsService(MagicMock(), AppSettings(timezone_name="Asia/Dubai"))
        svc._orders.list_active = AsyncMock(return_value=orders)
        svc._orders.list_by_collection_range = AsyncMock(return_value=orders)
        svc._guests.count_active = AsyncMock(return_value=3)
        return svc

    def test_dashboard_loads_live_orders(self):
        svc = self._service([_order(items=[_item("Turkey", 1, "550")])])
        stats = _run(svc.dashboard_stats())
        self.assertEqual(stats.total_orders, 1)
        self.assertEqual(stats.total_guests, 3)
        self.assertEqual(len(stats.trend), 30)

    def test_daily_defaults_to_today(self):
        svc = self._service([])
        svc.today = MagicMock(return_value=TODAY)
        daily = _run(svc.daily_analytics())
        self.assertEqual(daily.day, TODAY)
        svc._orders.list_by_collection_range.assert_awaited_once_with(TODAY, TODAY)

    def test_range_validates_before_loading(self):
        svc = self._service([])
        with self.assertRaises(ValidationError):
            _run(svc.range_analytics(date(2025, 12, 24), date(2025, 12, 1)))
        svc._orders.list_by_collection_range.assert_not_awaited()


if __name__ == "__main__":
    unittest.main()
