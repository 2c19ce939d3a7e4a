"""Pydantic schemas for the Analytics API."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, List
from uuid import UUID

from pydantic import BaseModel


class TrendPointResponse(BaseModel):
    day: date
    revenue: Decimal
    orders: int

    model_config = {"from_attributes": True}


class ItemSummaryResponse(BaseModel):
    name: str
    serving_size: str
    quantity: int
    revenue: Decimal

    model_config = {"from_attributes": True}


class UpcomingCollectionResponse(BaseModel):
    order_id: UUID
    order_number: str
    guest_name: str
    collection_date: date
    collection_time: str
    status: str
    total_amount: Decimal

    model_config = {"from_attributes": True}


class DashboardResponse(BaseModel):
    currency: str
    total_revenue: Decimal
    total_collected: Decimal
    total_orders: int
    average_order_value: Decimal
    today_revenue: Decimal
    today_orders: int
    total_guests: int
    status_counts: Dict[str, int]
    trend: List[TrendPointResponse]
    top_items: List[ItemSummaryResponse]
    upcoming: List[UpcomingCollectionResponse]


class DailyOrderSummary(BaseModel):
    id: UUID
    order_number: str
    guest_name: str
    collection_time: str
    status: str
    total_amount: Decimal
    total_paid: Decimal

    model_config = {"from_attributes": True}


class DailyAnalyticsResponse(BaseModel):
    currency: str
    day: date
    total_orders: int
    revenue: Decimal
    status_counts: Dict[str, int]
    items: List[ItemSummaryResponse]
    confirmed_orders: int
    pending_orders: int
    collected_orders: int
    orders: List[DailyOrderSummary]


class DayBreakdownResponse(BaseModel):
    day: date
    orders: int
    revenue: Decimal

    model_config = {"from_attributes": True}


class RangeAnalyticsResponse(BaseModel):
    currency: str
    start_date: date
    end_date: date
    total_orders: int
    revenue: Decimal
    status_counts: Dict[str, int]
    items: List[ItemSummaryResponse]
    daily: List[DayBreakdownResponse]
