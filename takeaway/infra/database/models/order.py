"""Order aggregate: order row plus its items, status history and payment records."""
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from takeaway.domain.types import GuestDetails
from takeaway.infra.database.models.base import ActorMixin, Base, TimestampMixin, _money, _uuid_pk


class Order(Base, TimestampMixin, ActorMixin):
    """A takeaway order. Children are loaded eagerly (selectin) with the row."""

    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_order_number", "order_number", unique=True),
        Index("ix_orders_collection", "is_deleted", "collection_date", "collection_time"),
        Index("ix_orders_created_at", "created_at"),
        CheckConstraint("total_paid >= 0", name="ck_orders_total_paid_nonneg"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    # Human-readable sequence number (e.g. FTP-0001); immutable after insert
    order_number: Mapped[str] = mapped_column(String(20), nullable=False)

    # Weak reference: lookup only, the order does not own the guest
    guest_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("guests.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Guest snapshot captured at order time
    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    guest_phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    guest_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    collection_person_name: Mapped[str] = mapped_column(String(255), nullable=False)
    collection_person_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    collection_person_phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    total_amount: Mapped[Decimal] = _money()
    collection_date: Mapped[date] = mapped_column(Date, nullable=False)
    collection_time: Mapped[str] = mapped_column(String(16), nullable=False)

    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    total_paid: Mapped[Decimal] = _money(zero_default=True)

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    items: Mapped[List["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )
    status_history: Mapped[List["OrderStatusEntry"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderStatusEntry.sequence",
        lazy="selectin",
    )
    payment_records: Mapped[List["PaymentRecord"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="PaymentRecord.sequence",
        lazy="selectin",
    )

    @property
    def guest_details(self) -> GuestDetails:
        return GuestDetails(
            name=self.guest_name,
            email=self.guest_email,
            phone=self.guest_phone,
            address=self.guest_address,
        )

    def item_by_id(self, item_id: uuid.UUID) -> Optional["OrderItem"]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class OrderItem(Base):
    """One order line: snapshot of the menu entry plus quantity and fulfillment status."""

    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity"),
        CheckConstraint("price >= 0", name="ck_order_items_price"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    menu_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("menu_items.id", ondelete="RESTRICT"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    serving_size: Mapped[str] = mapped_column(String(128), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = _money()
    total_price: Mapped[Decimal] = _money()
    """Always quantity * price."""
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    order: Mapped[Order] = relationship(back_populates="items")


class OrderStatusEntry(Base):
    """Append-only status history row."""

    __tablename__ = "order_status_history"

    id: Mapped[uuid.UUID] = _uuid_pk()
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    changed_by: Mapped[str] = mapped_column(String(64), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    order: Mapped[Order] = relationship(back_populates="status_history")


class PaymentRecord(Base):
    """Append-only payment row; amounts are strictly positive."""

    __tablename__ = "order_payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_order_payments_amount"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = _money()
    method: Mapped[str] = mapped_column(String(32), nullable=False)
    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    order: Mapped[Order] = relationship(back_populates="payment_records")
