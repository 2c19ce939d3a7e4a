"""Enquiries API: CRUD and conversion into orders."""
from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.api.dependencies import get_actor, get_session, get_settings
from takeaway.api.schemas.enquiries import (
    EnquiryConversionResponse,
    EnquiryConvertRequest,
    EnquiryCreateRequest,
    EnquiryResponse,
    EnquiryUpdateRequest,
)
from takeaway.api.schemas.orders import OrderResponse
from takeaway.config import AppSettings
from takeaway.services.enquiry_service import EnquiryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/enquiries", tags=["enquiries"])


@router.post("", response_model=EnquiryResponse, status_code=201)
async def create_enquiry(
    body: EnquiryCreateRequest,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
    settings: AppSettings = Depends(get_settings),
):
    enquiry = await EnquiryService(session, settings).create_enquiry(body.to_input(), actor)
    await session.commit()
    return EnquiryResponse.model_validate(enquiry)


@router.get("", response_model=List[EnquiryResponse])
async def list_enquiries(
    status: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    session: AsyncSession = Depends(get_session),
    settings: AppSettings = Depends(get_settings),
):
    items = await EnquiryService(session, settings).list_enquiries(status=status, skip=skip, limit=limit)
    return [EnquiryResponse.model_validate(e) for e in items]


@router.get("/{enquiry_id}", response_model=EnquiryResponse)
async def get_enquiry(
    enquiry_id: UUID,
    session: AsyncSession = Depends(get_session),
    settings: AppSettings = Depends(get_settings),
):
    return EnquiryResponse.model_validate(await EnquiryService(session, settings).get_enquiry(enquiry_id))


@router.patch("/{enquiry_id}", response_model=EnquiryResponse)
async def update_enquiry(
    enquiry_id: UUID,
    body: EnquiryUpdateRequest,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
    settings: AppSettings = Depends(get_settings),
):
    data = body.model_dump(exclude_unset=True)
    enquiry = await EnquiryService(session, settings).update_enquiry(enquiry_id, data, actor)
    await session.commit()
    return EnquiryResponse.model_validate(enquiry)


@router.delete("/{enquiry_id}", status_code=204)
async def delete_enquiry(
    enquiry_id: UUID,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
    settings: AppSettings = Depends(get_settings),
):
    await EnquiryService(session, settings).delete_enquiry(enquiry_id, actor)
    await session.commit()


@router.post("/{enquiry_id}/convert", response_model=EnquiryConversionResponse, status_code=201)
async def convert_enquiry(
    enquiry_id: UUID,
    body: EnquiryConvertRequest,
    session: AsyncSession = Depends(get_session),
    actor: str = Depends(get_actor),
    settings: AppSettings = Depends(get_settings),
):
    """Create an order from the enquiry and mark the enquiry converted."""
    order, enquiry = await EnquiryService(session, settings).convert_to_order(
        enquiry_id, body.to_input(), actor,
    )
    await session.commit()
    return EnquiryConversionResponse(
        order=OrderResponse.model_validate(order),
        enquiry=EnquiryResponse.model_validate(enquiry),
    )
