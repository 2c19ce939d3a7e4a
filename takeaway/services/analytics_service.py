"""
AnalyticsService: read-only sales aggregation over live (non-deleted) orders.

The aggregation itself lives in plain functions (build_dashboard, build_daily,
build_range) that take already-loaded orders; the service only loads rows and
supplies "today" in the configured business time zone.

Revenue conventions:
  dashboard        sum of total_amount (booked), plus sum of total_paid (collected)
  daily / range    sum of total_paid, bucketed by collection_date
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.config import AppSettings, load_app_settings
from takeaway.core.clock import local_date, now_in, trailing_days
from takeaway.core.exceptions import ValidationError
from takeaway.domain.pricing import MONEY_QUANT, ZERO
from takeaway.domain.types import OrderStatus
from takeaway.infra.database.repositories.guest import GuestRepository
from takeaway.infra.database.repositories.order import OrderRepository

logger = logging.getLogger(__name__)

_UPCOMING_STATUSES = (OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value)


@dataclass
class TrendPoint:
    day: date
    revenue: Decimal = ZERO
    orders: int = 0


@dataclass
class ItemSummary:
    name: str
    serving_size: str
    quantity: int = 0
    revenue: Decimal = ZERO


@dataclass
class UpcomingCollection:
    order_id: UUID
    order_number: str
    guest_name: str
    collection_date: date
    collection_time: str
    status: str
    total_amount: Decimal


@dataclass
class DashboardStats:
    total_revenue: Decimal
    total_collected: Decimal
    total_orders: int
    average_order_value: Decimal
    today_revenue: Decimal
    today_orders: int
    total_guests: int
    status_counts: Dict[str, int]
    trend: List[TrendPoint]
    top_items: List[ItemSummary]
    upcoming: List[UpcomingCollection]


@dataclass
class DailyAnalytics:
    day: date
    total_orders: int
    revenue: Decimal
    status_counts: Dict[str, int]
    items: List[ItemSummary]
    orders: List[Any] = field(default_factory=list)

    @property
    def confirmed_orders(self) -> int:
        return self.status_counts.get(OrderStatus.CONFIRMED.value, 0)

    @property
    def pending_orders(self) -> int:
        return self.status_counts.get(OrderStatus.PENDING.value, 0)

    @property
    def collected_orders(self) -> int:
        return self.status_counts.get(OrderStatus.COLLECTED.value, 0)


@dataclass
class DayBreakdown:
    day: date
    orders: int = 0
    revenue: Decimal = ZERO


@dataclass
class RangeAnalytics:
    start_date: date
    end_date: date
    total_orders: int
    revenue: Decimal
    status_counts: Dict[str, int]
    items: List[ItemSummary]
    daily: List[DayBreakdown]


def _live(orders: Iterable[Any]) -> List[Any]:
    return [o for o in orders if not o.is_deleted]


def summarize_items(orders: Iterable[Any]) -> List[ItemSummary]:
    """Quantity and revenue per (name, serving size), in first-seen order."""
    summary: Dict[Tuple[str, str], ItemSummary] = {}
    for order in orders:
        for item in order.items:
            key = (item.name, item.serving_size)
            entry = summary.get(key)
            if entry is None:
                entry = summary[key] = ItemSummary(name=item.name, serving_size=item.serving_size)
            entry.quantity += item.quantity
            entry.revenue += item.total_price
    return list(summary.values())


def top_items(orders: Iterable[Any], limit: int) -> List[ItemSummary]:
    """Items ranked by summed quantity; sorted() is stable so ties keep first-seen order."""
    return sorted(summarize_items(orders), key=lambda s: s.quantity, reverse=True)[:limit]


def _present_status_counts(orders: Iterable[Any]) -> Dict[str, int]:
    return dict(Counter(o.status for o in orders))


def build_dashboard(
    orders: Iterable[Any],
    *,
    today: date,
    tz: tzinfo,
    total_guests: int,
    trend_days: int = 30,
    top_items_limit: int = 10,
    upcoming_window_days: int = 7,
    upcoming_limit: int = 10,
) -> DashboardStats:
    live = _live(orders)
    total_revenue = sum((o.total_amount for o in live), ZERO)
    total_collected = sum((o.total_paid for o in live), ZERO)
    average = (total_revenue / len(live)).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP) if live else ZERO

    created_day = {id(o): local_date(o.created_at, tz) for o in live}
    todays = [o for o in live if created_day[id(o)] == today]

    status_counts = {status.value: 0 for status in OrderStatus}
    for order in live:
        status_counts[order.status] = status_counts.get(order.status, 0) + 1

    trend = [TrendPoint(day=d) for d in trailing_days(today, trend_days)]
    by_day = {point.day: point for point in trend}
    for order in live:
        point = by_day.get(created_day[id(order)])
        if point is not None:
            point.revenue += order.total_amount
            point.orders += 1

    horizon = today + timedelta(days=upcoming_window_days)
    upcoming_orders = sorted(
        (
            o for o in live
            if o.status in _UPCOMING_STATUSES and today <= o.collection_date <= horizon
        ),
        key=lambda o: (o.collection_date, o.collection_time),
    )[:upcoming_limit]

    return DashboardStats(
        total_revenue=total_revenue,
        total_collected=total_collected,
        total_orders=len(live),
        average_order_value=average,
        today_revenue=sum((o.total_amount for o in todays), ZERO),
        today_orders=len(todays),
        total_guests=total_guests,
        status_counts=status_counts,
        trend=trend,
        top_items=top_items(live, top_items_limit),
        upcoming=[
            UpcomingCollection(
                order_id=o.id,
                order_number=o.order_number,
                guest_name=o.guest_name,
                collection_date=o.collection_date,
                collection_time=o.collection_time,
                status=o.status,
                total_amount=o.total_amount,
            )
            for o in upcoming_orders
        ],
    )


def build_daily(orders: Iterable[Any], day: date) -> DailyAnalytics:
    selected = [o for o in _live(orders) if o.collection_date == day]
    return DailyAnalytics(
        day=day,
        total_orders=len(selected),
        revenue=sum((o.total_paid for o in selected), ZERO),
        status_counts=_present_status_counts(selected),
        items=summarize_items(selected),
        orders=selected,
    )


def build_range(orders: Iterable[Any], start_date: Optional[date], end_date: Optional[date]) -> RangeAnalytics:
    start, end = validate_range(start_date, end_date)
    selected = [o for o in _live(orders) if start <= o.collection_date <= end]

    daily: Dict[date, DayBreakdown] = {}
    for order in selected:
        bucket = daily.get(order.collection_date)
        if bucket is None:
            bucket = daily[order.collection_date] = DayBreakdown(day=order.collection_date)
        bucket.orders += 1
        bucket.revenue += order.total_paid

    return RangeAnalytics(
        start_date=start,
        end_date=end,
        total_orders=len(selected),
        revenue=sum((o.total_paid for o in selected), ZERO),
        status_counts=_present_status_counts(selected),
        items=summarize_items(selected),
        daily=[daily[d] for d in sorted(daily)],
    )


def validate_range(start_date: Optional[date], end_date: Optional[date]) -> Tuple[date, date]:
    if start_date is None or end_date is None:
        raise ValidationError(
            "Both start_date and end_date are required",
            details={"field": "start_date" if start_date is None else "end_date"},
        )
    if start_date > end_date:
        raise ValidationError("start_date must not be after end_date", details={"field": "start_date"})
    return start_date, end_date


class AnalyticsService:
    def __init__(self, session: AsyncSession, settings: Optional[AppSettings] = None) -> None:
        self._settings = settings or load_app_settings()
        self._orders = OrderRepository(session)
        self._guests = GuestRepository(session)

    def today(self) -> date:
        return now_in(self._settings.tz).date()

    async def dashboard_stats(self) -> DashboardStats:
        s = self._settings
        orders = await self._orders.list_active()
        total_guests = await self._guests.count_active()
        stats = build_dashboard(
            orders,
            today=self.today(),
            tz=s.tz,
            total_guests=total_guests,
            trend_days=s.trend_days,
            top_items_limit=s.top_items_limit,
            upcoming_window_days=s.upcoming_window_days,
            upcoming_limit=s.upcoming_limit,
        )
        logger.debug("AnalyticsService: dashboard over %d order(s)", stats.total_orders)
        return stats

    async def daily_analytics(self, day: Optional[date] = None) -> DailyAnalytics:
        day = day or self.today()
        orders = await self._orders.list_by_collection_range(day, day)
        return build_daily(orders, day)

    async def range_analytics(self, start_date: Optional[date], end_date: Optional[date]) -> RangeAnalytics:
        start, end = validate_range(start_date, end_date)
        orders = await self._orders.list_by_collection_range(start, end)
        return build_range(orders, start, end)
