"""Pydantic schemas for the Menu Items API."""
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class PricingOption(BaseModel):
    serving_size: str
    price: Decimal


class MenuItemResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    category: str
    pricing: List[PricingOption]
    allergens: List[str]
    is_available: bool

    model_config = {"from_attributes": True}


class PriceResponse(BaseModel):
    name: str
    serving_size: str
    price: Decimal
