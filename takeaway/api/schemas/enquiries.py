"""Pydantic schemas for the Enquiries API."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from takeaway.api.schemas.orders import OrderItemIn, OrderResponse
from takeaway.domain.types import EnquiryConversion, EnquiryInput


class EnquiryCreateRequest(BaseModel):
    guest_name: str
    enquiry_details: str
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_address: Optional[str] = None
    desired_collection_date: Optional[date] = None
    desired_collection_time: Optional[str] = None
    notes: Optional[str] = None

    def to_input(self) -> EnquiryInput:
        return EnquiryInput(**self.model_dump())


class EnquiryUpdateRequest(BaseModel):
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_address: Optional[str] = None
    enquiry_details: Optional[str] = None
    desired_collection_date: Optional[date] = None
    desired_collection_time: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class EnquiryConvertRequest(BaseModel):
    items: List[OrderItemIn] = Field(default_factory=list)
    payment_method: str
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_address: Optional[str] = None
    collection_date: Optional[date] = None
    collection_time: Optional[str] = None

    def to_input(self) -> EnquiryConversion:
        return EnquiryConversion(
            items=[i.to_input() for i in self.items],
            payment_method=self.payment_method,
            guest_email=self.guest_email,
            guest_phone=self.guest_phone,
            guest_address=self.guest_address,
            collection_date=self.collection_date,
            collection_time=self.collection_time,
        )


class EnquiryResponse(BaseModel):
    id: UUID
    guest_name: str
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_address: Optional[str] = None
    enquiry_details: str
    desired_collection_date: Optional[date] = None
    desired_collection_time: Optional[str] = None
    status: str
    converted_order_id: Optional[UUID] = None
    notes: Optional[str] = None
    created_by: str
    last_modified_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EnquiryConversionResponse(BaseModel):
    order: OrderResponse
    enquiry: EnquiryResponse
