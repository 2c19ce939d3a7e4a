"""Pydantic schemas for the Guests API."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from takeaway.domain.types import ContactMethod, GuestInput


class GuestCreateRequest(BaseModel):
    name: str
    email: str
    phone: str
    address: str
    notes: Optional[str] = None
    dietary_requirements: Optional[str] = None
    preferred_contact_method: str = ContactMethod.EMAIL.value

    def to_input(self) -> GuestInput:
        return GuestInput(**self.model_dump())


class GuestUpdateRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    dietary_requirements: Optional[str] = None
    preferred_contact_method: Optional[str] = None


class GuestResponse(BaseModel):
    id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    dietary_requirements: Optional[str] = None
    preferred_contact_method: str
    total_orders: int
    total_spent: Decimal
    last_order_date: Optional[date] = None
    is_deleted: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class GuestListResponse(BaseModel):
    items: List[GuestResponse]
    total: int
    skip: int
    limit: int
