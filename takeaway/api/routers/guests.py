"""Guests API: profile CRUD, search and a guest's orders."""
from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.api.dependencies import get_actor, get_session
from takeaway.api.schemas.guests import (
    GuestCreateRequest,
    GuestListResponse,
    GuestResponse,
    GuestUpdateRequest,
)
from takeaway.api.schemas.orders import OrderResponse
from takeaway.infra.database.models.guest import Guest
from takeaway.services.guest_service import GuestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/guests", tags=["guests"])


def _to_response(g: Guest) -> GuestResponse:
    return GuestResponse.model_validate(g)


@router.post("", response_model=GuestResponse, status_code=201)
async def create_guest(
    body: GuestCreateRequest,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
):
    guest = await GuestService(session).create_guest(body.to_input(), actor)
    await session.commit()
    return _to_response(guest)


@router.get("", response_model=GuestListResponse)
async def list_guests(
    search: Optional[str] = None,
    include_deleted: bool = False,
    skip: int = 0,
    limit: int = 20,
    session: AsyncSession = Depends(get_session),
):
    guests, total = await GuestService(session).list_guests(
        search=search, include_deleted=include_deleted, skip=skip, limit=limit,
    )
    return GuestListResponse(
        items=[_to_response(g) for g in guests], total=total, skip=skip, limit=limit,
    )


@router.get("/search", response_model=List[GuestResponse])
async def search_guests(
    q: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    """Quick lookup by name, email or phone (min 2 characters, max 10 hits)."""
    guests = await GuestService(session).search_guests(q)
    return [_to_response(g) for g in guests]


@router.get("/{guest_id}", response_model=GuestResponse)
async def get_guest(
    guest_id: UUID,
    include_deleted: bool = False,
    session: AsyncSession = Depends(get_session),
):
    return _to_response(await GuestService(session).get_guest(guest_id, include_deleted=include_deleted))


@router.patch("/{guest_id}", response_model=GuestResponse)
async def update_guest(
    guest_id: UUID,
    body: GuestUpdateRequest,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
):
    data = body.model_dump(exclude_unset=True)
    guest = await GuestService(session).update_guest(guest_id, data, actor)
    await session.commit()
    return _to_response(guest)


@router.delete("/{guest_id}", status_code=204)
async def delete_guest(
    guest_id: UUID,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
):
    await GuestService(session).delete_guest(guest_id, actor)
    await session.commit()


@router.get("/{guest_id}/orders", response_model=List[OrderResponse])
async def list_guest_orders(
    guest_id: UUID,
    skip: int = 0,
    limit: int = 100,
    session: AsyncSession = Depends(get_session),
):
    orders = await GuestService(session).list_guest_orders(guest_id, skip=skip, limit=limit)
    return [OrderResponse.model_validate(o) for o in orders]
