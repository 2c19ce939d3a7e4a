"""EnquiryService: pre-order enquiries and their conversion into orders."""
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.config import AppSettings
from takeaway.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from takeaway.domain.types import (
    ChangeType,
    CollectionPerson,
    EnquiryConversion,
    EnquiryInput,
    EnquiryStatus,
    EntityType,
    FieldChange,
    GuestDetails,
    OrderCreate,
    normalize_email,
    parse_enum,
)
from takeaway.infra.database.models.enquiry import Enquiry
from takeaway.infra.database.models.order import Order
from takeaway.infra.database.repositories.enquiry import EnquiryRepository
from takeaway.services.audit_service import AuditRecorder, diff_fields
from takeaway.services.order_service import OrderService

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = (
    "guest_name",
    "guest_email",
    "guest_phone",
    "guest_address",
    "enquiry_details",
    "desired_collection_date",
    "desired_collection_time",
    "status",
    "notes",
)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _required(value: Optional[str], field_name: str) -> str:
    cleaned = _clean(value)
    if cleaned is None:
        raise ValidationError(f"{field_name} is required", details={"field": field_name})
    return cleaned


class EnquiryService:
    def __init__(self, session: AsyncSession, settings: Optional[AppSettings] = None) -> None:
        self._repo = EnquiryRepository(session)
        self._orders = OrderService(session, settings)
        self._audit = AuditRecorder(session)

    async def create_enquiry(self, data: EnquiryInput, actor: str) -> Enquiry:
        enquiry = Enquiry(
            id=uuid.uuid4(),
            guest_name=_required(data.guest_name, "guest_name"),
            guest_email=normalize_email(data.guest_email),
            guest_phone=_clean(data.guest_phone),
            guest_address=_clean(data.guest_address),
            enquiry_details=_required(data.enquiry_details, "enquiry_details"),
            desired_collection_date=data.desired_collection_date,
            desired_collection_time=_clean(data.desired_collection_time),
            status=EnquiryStatus.NEW.value,
            notes=_clean(data.notes),
            created_by=actor,
            last_modified_by=actor,
        )
        await self._repo.add(enquiry)
        await self._audit.record(
            EntityType.ENQUIRY, enquiry.id, ChangeType.CREATE, actor,
            changes=[FieldChange("guest_name", None, enquiry.guest_name)],
            description=f"Enquiry from {enquiry.guest_name} created",
        )
        logger.info("EnquiryService: created enquiry %s", enquiry.id)
        return enquiry

    async def list_enquiries(
        self,
        *,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Enquiry]:
        if status in (None, "", "all"):
            status = None
        else:
            status = parse_enum(EnquiryStatus, status, "status").value
        return await self._repo.list_all(status=status, skip=skip, limit=limit)

    async def get_enquiry(self, enquiry_id: UUID) -> Enquiry:
        enquiry = await self._repo.get_by_id(enquiry_id)
        if enquiry is None:
            raise NotFoundError(f"Enquiry {enquiry_id} not found", details={"enquiry_id": str(enquiry_id)})
        return enquiry

    async def update_enquiry(self, enquiry_id: UUID, data: Dict[str, Any], actor: str) -> Enquiry:
        unknown = [k for k in data if k not in _EDITABLE_FIELDS]
        if unknown:
            raise ValidationError(f"Unknown enquiry fields: {', '.join(unknown)}", details={"fields": unknown})

        patch: Dict[str, Any] = {}
        for key, value in data.items():
            if key in ("guest_name", "enquiry_details"):
                patch[key] = _required(value, key)
            elif key == "guest_email":
                patch[key] = normalize_email(value)
            elif key == "status":
                status = parse_enum(EnquiryStatus, value, "status")
                if status is EnquiryStatus.CONVERTED:
                    raise ValidationError(
                        "Use the convert operation to mark an enquiry as converted",
                        details={"field": "status"},
                    )
                patch[key] = status.value
            elif key == "desired_collection_date":
                if value is not None and not isinstance(value, date):
                    raise ValidationError("desired_collection_date must be a date", details={"field": key})
                patch[key] = value
            else:
                patch[key] = _clean(value)

        enquiry = await self.get_enquiry(enquiry_id)
        if enquiry.status == EnquiryStatus.CONVERTED.value and "status" in patch:
            raise InvalidStateError(
                f"Enquiry {enquiry_id} has been converted; its status is final",
                details={"enquiry_id": str(enquiry_id)},
            )
        before = {k: getattr(enquiry, k) for k in patch}
        changes = diff_fields(before, patch)
        if not changes:
            return enquiry
        await self._repo.update(enquiry, {**{c.field: c.new_value for c in changes}, "last_modified_by": actor})
        await self._audit.record(
            EntityType.ENQUIRY, enquiry.id, ChangeType.UPDATE, actor,
            changes=changes, description=f"Enquiry from {enquiry.guest_name} updated",
        )
        logger.info("EnquiryService: updated enquiry %s fields=%s", enquiry.id, [c.field for c in changes])
        return enquiry

    async def delete_enquiry(self, enquiry_id: UUID, actor: str) -> None:
        enquiry = await self.get_enquiry(enquiry_id)
        await self._repo.delete(enquiry.id)
        await self._audit.record(
            EntityType.ENQUIRY, enquiry_id, ChangeType.DELETE, actor,
            description=f"Enquiry from {enquiry.guest_name} deleted",
        )
        logger.info("EnquiryService: deleted enquiry %s", enquiry_id)

    async def convert_to_order(
        self,
        enquiry_id: UUID,
        data: EnquiryConversion,
        actor: str,
    ) -> Tuple[Order, Enquiry]:
        """Create an order from an enquiry through the normal order pipeline."""
        enquiry = await self.get_enquiry(enquiry_id)
        if enquiry.status == EnquiryStatus.CONVERTED.value:
            raise InvalidStateError(
                f"Enquiry {enquiry_id} has already been converted to an order",
                details={"enquiry_id": str(enquiry_id), "order_id": str(enquiry.converted_order_id)},
            )
        email = normalize_email(data.guest_email) or enquiry.guest_email
        phone = _clean(data.guest_phone) or enquiry.guest_phone
        address = _clean(data.guest_address) or enquiry.guest_address
        missing = [name for name, value in (("guest_email", email), ("guest_phone", phone),
                                            ("guest_address", address)) if not value]
        if missing:
            raise ValidationError(
                "Guest email, phone and address are required to create an order",
                details={"fields": missing},
            )

        order = await self._orders.create_order(
            OrderCreate(
                items=data.items,
                collection_date=data.collection_date or enquiry.desired_collection_date,
                collection_time=data.collection_time or enquiry.desired_collection_time,
                payment_method=data.payment_method,
                guest_details=GuestDetails(name=enquiry.guest_name, email=email, phone=phone, address=address),
                collection_person=CollectionPerson(name=enquiry.guest_name, email=email, phone=phone),
                note=f"Converted from enquiry {enquiry.id}",
            ),
            actor,
        )

        old_status = enquiry.status
        await self._repo.update(enquiry, {
            "status": EnquiryStatus.CONVERTED.value,
            "converted_order_id": order.id,
            "last_modified_by": actor,
        })
        await self._audit.record(
            EntityType.ENQUIRY, enquiry.id, ChangeType.STATUS_CHANGE, actor,
            changes=[
                FieldChange("status", old_status, enquiry.status),
                FieldChange("converted_order_id", None, order.id),
            ],
            description=f"Enquiry converted to order {order.order_number}",
        )
        logger.info("EnquiryService: enquiry %s converted to order %s", enquiry.id, order.order_number)
        return order, enquiry
