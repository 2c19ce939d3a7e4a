"""Orders API: create, list, get, update, status, payments, item updates, delete, history."""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.api.dependencies import get_actor, get_session, get_settings
from takeaway.api.schemas.orders import (
    ChangeLogResponse,
    ItemUpdateRequest,
    OrderCreateRequest,
    OrderResponse,
    OrderStatusRequest,
    OrderUpdateRequest,
    PaymentRequest,
)
from takeaway.config import AppSettings
from takeaway.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def _to_schema(o) -> OrderResponse:
    return OrderResponse.model_validate(o)


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(
    body: OrderCreateRequest,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
    settings: AppSettings = Depends(get_settings),
):
    svc = OrderService(session, settings)
    order = await svc.create_order(body.to_input(), actor)
    await session.commit()
    return _to_schema(order)


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    status: Optional[str] = None,
    collection_date: Optional[date] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    guest_id: Optional[UUID] = None,
    include_deleted: bool = False,
    skip: int = 0,
    limit: int = 100,
    session: AsyncSession = Depends(get_session),
    settings: AppSettings = Depends(get_settings),
):
    """List orders sorted by collection date then time."""
    svc = OrderService(session, settings)
    items = await svc.list_orders(
        status=status,
        collection_date=collection_date,
        date_from=date_from,
        date_to=date_to,
        guest_id=guest_id,
        include_deleted=include_deleted,
        skip=skip,
        limit=limit,
    )
    return [_to_schema(o) for o in items]


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    include_deleted: bool = False,
    session: AsyncSession = Depends(get_session),
    settings: AppSettings = Depends(get_settings),
):
    svc = OrderService(session, settings)
    return _to_schema(await svc.get_order(order_id, include_deleted=include_deleted))


@router.patch("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: UUID,
    body: OrderUpdateRequest,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
    settings: AppSettings = Depends(get_settings),
):
    """Update guest, collection person, items, schedule or payment method."""
    svc = OrderService(session, settings)
    order = await svc.update_order(order_id, body.to_input(), actor)
    await session.commit()
    return _to_schema(order)


@router.post("/{order_id}/status", response_model=OrderResponse)
async def change_status(
    order_id: UUID,
    body: OrderStatusRequest,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
    settings: AppSettings = Depends(get_settings),
):
    svc = OrderService(session, settings)
    order = await svc.change_status(order_id, body.status, actor, notes=body.notes)
    await session.commit()
    return _to_schema(order)


@router.post("/{order_id}/payments", response_model=OrderResponse, status_code=201)
async def record_payment(
    order_id: UUID,
    body: PaymentRequest,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
    settings: AppSettings = Depends(get_settings),
):
    svc = OrderService(session, settings)
    order = await svc.record_payment(order_id, body.amount, body.method, actor, notes=body.notes)
    await session.commit()
    return _to_schema(order)


@router.patch("/{order_id}/items/{item_id}", response_model=OrderResponse)
async def update_item(
    order_id: UUID,
    item_id: UUID,
    body: ItemUpdateRequest,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
    settings: AppSettings = Depends(get_settings),
):
    svc = OrderService(session, settings)
    order = await svc.update_item(order_id, item_id, actor, status=body.status, notes=body.notes)
    await session.commit()
    return _to_schema(order)


@router.delete("/{order_id}", status_code=204)
async def delete_order(
    order_id: UUID,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
    settings: AppSettings = Depends(get_settings),
):
    svc = OrderService(session, settings)
    await svc.delete_order(order_id, actor)
    await session.commit()


@router.get("/{order_id}/history", response_model=List[ChangeLogResponse])
async def order_history(
    order_id: UUID,
    skip: int = 0,
    limit: int = 100,
    session: AsyncSession = Depends(get_session),
    settings: AppSettings = Depends(get_settings),
):
    """Change-log entries of one order, newest first."""
    svc = OrderService(session, settings)
    entries = await svc.list_change_logs(order_id, skip=skip, limit=limit)
    return [ChangeLogResponse.model_validate(e) for e in entries]
