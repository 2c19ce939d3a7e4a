"""Pydantic schemas for the Orders API."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from takeaway.domain.types import (
    CollectionPerson,
    GuestDetails,
    ItemStatus,
    OrderCreate,
    OrderItemInput,
    OrderUpdate,
)


class OrderItemIn(BaseModel):
    menu_item_id: UUID
    name: str
    serving_size: str
    quantity: int
    price: Decimal
    status: str = ItemStatus.PENDING.value
    notes: Optional[str] = None

    def to_input(self) -> OrderItemInput:
        return OrderItemInput(
            menu_item_id=self.menu_item_id,
            name=self.name,
            serving_size=self.serving_size,
            quantity=self.quantity,
            price=self.price,
            status=self.status,
            notes=self.notes,
        )


class GuestDetailsIn(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    def to_input(self) -> GuestDetails:
        return GuestDetails(name=self.name, email=self.email, phone=self.phone, address=self.address)


class CollectionPersonIn(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    def to_input(self) -> CollectionPerson:
        return CollectionPerson(name=self.name, email=self.email, phone=self.phone)


class OrderCreateRequest(BaseModel):
    items: List[OrderItemIn] = Field(default_factory=list)
    guest_id: Optional[UUID] = None
    guest_details: Optional[GuestDetailsIn] = None
    collection_person: Optional[CollectionPersonIn] = None
    collection_date: Optional[date] = None
    collection_time: Optional[str] = None
    payment_method: str
    notes: Optional[str] = Field(None, description="Note for the initial status-history entry.")

    def to_input(self) -> OrderCreate:
        return OrderCreate(
            items=[i.to_input() for i in self.items],
            collection_date=self.collection_date,
            collection_time=self.collection_time,
            payment_method=self.payment_method,
            guest_id=self.guest_id,
            guest_details=self.guest_details.to_input() if self.guest_details else None,
            collection_person=self.collection_person.to_input() if self.collection_person else None,
            note=self.notes,
        )


class OrderUpdateRequest(BaseModel):
    guest_id: Optional[UUID] = None
    guest_details: Optional[GuestDetailsIn] = None
    collection_person: Optional[CollectionPersonIn] = None
    items: Optional[List[OrderItemIn]] = None
    collection_date: Optional[date] = None
    collection_time: Optional[str] = None
    payment_method: Optional[str] = None

    def to_input(self) -> OrderUpdate:
        return OrderUpdate(
            guest_id=self.guest_id,
            guest_details=self.guest_details.to_input() if self.guest_details else None,
            collection_person=self.collection_person.to_input() if self.collection_person else None,
            items=[i.to_input() for i in self.items] if self.items is not None else None,
            collection_date=self.collection_date,
            collection_time=self.collection_time,
            payment_method=self.payment_method,
        )


class OrderStatusRequest(BaseModel):
    status: str
    notes: Optional[str] = None


class PaymentRequest(BaseModel):
    amount: Decimal
    method: str
    notes: Optional[str] = None


class ItemUpdateRequest(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = None


class OrderItemResponse(BaseModel):
    id: UUID
    menu_item_id: UUID
    name: str
    serving_size: str
    quantity: int
    price: Decimal
    total_price: Decimal
    status: str
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class StatusEntryResponse(BaseModel):
    status: str
    changed_by: str
    changed_at: datetime
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class PaymentRecordResponse(BaseModel):
    id: UUID
    amount: Decimal
    method: str
    received_at: datetime
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    id: UUID
    order_number: str
    guest_id: Optional[UUID] = None
    guest_name: str
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_address: Optional[str] = None
    collection_person_name: str
    collection_person_email: Optional[str] = None
    collection_person_phone: Optional[str] = None
    items: List[OrderItemResponse]
    total_amount: Decimal
    collection_date: date
    collection_time: str
    status: str
    status_history: List[StatusEntryResponse]
    payment_method: str
    payment_status: str
    payment_records: List[PaymentRecordResponse]
    total_paid: Decimal
    is_deleted: bool
    created_by: str
    last_modified_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ChangeLogResponse(BaseModel):
    id: UUID
    entity_type: str
    entity_id: UUID
    change_type: str
    changed_by: str
    changes: List[Any]
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
