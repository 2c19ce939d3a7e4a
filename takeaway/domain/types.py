"""Enums and plain input/value types shared by the services and the API layer."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional, Type, TypeVar
from uuid import UUID

from takeaway.core.exceptions import ValidationError


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ON_HOLD = "on_hold"
    AWAITING_COLLECTION = "awaiting_collection"
    DELAYED = "delayed"
    COLLECTED = "collected"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    DELETED = "deleted"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    REFUNDED = "refunded"
    """Only ever set by an explicit status change, never derived."""


class PaymentMethod(str, Enum):
    CARD = "card"
    CASH = "cash"
    SERVME = "servme"
    SECUREPAY = "securepay"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


class ItemStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    NOT_COLLECTED = "not_collected"
    COLLECTED = "collected"


class ContactMethod(str, Enum):
    EMAIL = "email"
    PHONE = "phone"


class EnquiryStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    CONVERTED = "converted"
    CLOSED = "closed"


class MenuCategory(str, Enum):
    ROASTS = "roasts"
    SMOKED_SALMON = "smoked_salmon"
    POTATOES = "potatoes"
    VEGETABLES = "vegetables"
    SAUCES = "sauces"
    DESSERTS = "desserts"


class EntityType(str, Enum):
    ORDER = "order"
    GUEST = "guest"
    ENQUIRY = "enquiry"


class ChangeType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    STATUS_CHANGE = "status_change"
    ITEM_UPDATE = "item_update"
    PAYMENT_ADD = "payment_add"


EnumT = TypeVar("EnumT", bound=Enum)


def parse_enum(enum_cls: Type[EnumT], value: Any, field_name: str) -> EnumT:
    """Coerce *value* into *enum_cls* or raise ValidationError naming the field."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)  # type: ignore[attr-defined]
        raise ValidationError(
            f"Invalid {field_name} {value!r}. Use one of: {allowed}",
            details={"field": field_name},
        ) from None


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Trim and lower-case; blank becomes None."""
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


@dataclass
class GuestDetails:
    """Denormalized guest snapshot carried on every order."""

    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @property
    def normalized_email(self) -> Optional[str]:
        return normalize_email(self.email)


@dataclass
class CollectionPerson:
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass
class OrderItemInput:
    """One order line as supplied by the caller; price comes from the menu catalog."""

    menu_item_id: UUID
    name: str
    serving_size: str
    quantity: int
    price: Decimal
    status: ItemStatus = ItemStatus.PENDING
    notes: Optional[str] = None


@dataclass
class OrderCreate:
    items: List[OrderItemInput]
    collection_date: Optional[date]
    collection_time: Optional[str]
    payment_method: Any
    guest_id: Optional[UUID] = None
    guest_details: Optional[GuestDetails] = None
    collection_person: Optional[CollectionPerson] = None
    note: Optional[str] = None
    """Text of the initial status-history entry (defaults to "Order created")."""


@dataclass
class OrderUpdate:
    """Partial update; None means "leave unchanged"."""

    guest_id: Optional[UUID] = None
    guest_details: Optional[GuestDetails] = None
    collection_person: Optional[CollectionPerson] = None
    items: Optional[List[OrderItemInput]] = None
    collection_date: Optional[date] = None
    collection_time: Optional[str] = None
    payment_method: Any = None

    @property
    def touches_guest(self) -> bool:
        return self.guest_id is not None or self.guest_details is not None


@dataclass
class GuestInput:
    name: str
    email: str
    phone: str
    address: str
    notes: Optional[str] = None
    dietary_requirements: Optional[str] = None
    preferred_contact_method: Any = ContactMethod.EMAIL


@dataclass
class FieldChange:
    """One (field, old, new) triple of a change-log entry."""

    field: str
    old_value: Any = None
    new_value: Any = None


@dataclass
class GuestRollup:
    """Derived guest statistics over the guest's non-deleted orders."""

    total_orders: int = 0
    total_spent: Decimal = Decimal("0.00")
    last_order_date: Optional[date] = None


@dataclass
class EnquiryInput:
    guest_name: str
    enquiry_details: str
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_address: Optional[str] = None
    desired_collection_date: Optional[date] = None
    desired_collection_time: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class EnquiryConversion:
    """Extra data needed to turn an enquiry into an order."""

    items: List[OrderItemInput]
    payment_method: Any
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_address: Optional[str] = None
    collection_date: Optional[date] = None
    collection_time: Optional[str] = None
