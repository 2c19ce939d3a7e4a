"""Analytics API: dashboard, daily and date-range sales figures."""
from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.api.dependencies import get_session, get_settings
from takeaway.api.schemas.analytics import (
    DailyAnalyticsResponse,
    DailyOrderSummary,
    DashboardResponse,
    RangeAnalyticsResponse,
)
from takeaway.config import AppSettings
from takeaway.services.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    session: AsyncSession = Depends(get_session),
    settings: AppSettings = Depends(get_settings),
):
    stats = await AnalyticsService(session, settings).dashboard_stats()
    return DashboardResponse(currency=settings.currency, **asdict(stats))


@router.get("/daily", response_model=DailyAnalyticsResponse)
async def daily(
    day: Optional[date] = Query(None, alias="date"),
    session: AsyncSession = Depends(get_session),
    settings: AppSettings = Depends(get_settings),
):
    """Orders collected on one day (default: today in the business time zone)."""
    result = await AnalyticsService(session, settings).daily_analytics(day)
    return DailyAnalyticsResponse(
        currency=settings.currency,
        day=result.day,
        total_orders=result.total_orders,
        revenue=result.revenue,
        status_counts=result.status_counts,
        items=[asdict(i) for i in result.items],
        confirmed_orders=result.confirmed_orders,
        pending_orders=result.pending_orders,
        collected_orders=result.collected_orders,
        orders=[DailyOrderSummary.model_validate(o) for o in result.orders],
    )


@router.get("/range", response_model=RangeAnalyticsResponse)
async def date_range(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    session: AsyncSession = Depends(get_session),
    settings: AppSettings = Depends(get_settings),
):
    """Inclusive collection-date range; both bounds are required."""
    result = await AnalyticsService(session, settings).range_analytics(start_date, end_date)
    return RangeAnalyticsResponse(currency=settings.currency, **asdict(result))
