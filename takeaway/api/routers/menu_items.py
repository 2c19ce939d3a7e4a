"""Menu Items API: read access to the catalog."""
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.api.dependencies import get_session
from takeaway.api.schemas.menu import MenuItemResponse, PriceResponse
from takeaway.services.menu_service import MenuService

router = APIRouter(prefix="/menu-items", tags=["menu"])


@router.get("", response_model=List[MenuItemResponse])
async def list_menu_items(
    category: Optional[str] = None,
    available: Optional[bool] = None,
    session: AsyncSession = Depends(get_session),
):
    items = await MenuService(session).list_menu_items(category=category, available=available)
    return [MenuItemResponse.model_validate(i) for i in items]


@router.get("/price", response_model=PriceResponse)
async def get_price(
    name: str = Query(..., min_length=1),
    serving_size: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    price = await MenuService(session).price_for(name, serving_size)
    return PriceResponse(name=name, serving_size=serving_size, price=price)


@router.get("/{menu_item_id}", response_model=MenuItemResponse)
async def get_menu_item(
    menu_item_id: UUID,
    session: AsyncSession = Depends(get_session),
):
    return MenuItemResponse.model_validate(await MenuService(session).get_menu_item(menu_item_id))
