"""Guest ORM model: a deduplicated guest profile with order rollups."""
from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Date, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from takeaway.infra.database.models.base import ActorMixin, Base, TimestampMixin, _money, _uuid_pk


class Guest(Base, TimestampMixin, ActorMixin):
    """A guest profile, unique by lower-cased email among non-deleted rows."""

    __tablename__ = "guests"
    __table_args__ = (
        Index(
            "uq_guests_email_active",
            "email",
            unique=True,
            postgresql_where=text("is_deleted = false"),
        ),
        Index("ix_guests_name", "name"),
        Index("ix_guests_phone", "phone"),
        Index("ix_guests_deleted_created", "is_deleted", "created_at"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    """Always stored trimmed and lower-cased."""
    phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dietary_requirements: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preferred_contact_method: Mapped[str] = mapped_column(String(16), nullable=False, default="email")

    # Rollups over non-deleted orders; written only by GuestService.refresh_stats
    total_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_spent: Mapped[Decimal] = _money(zero_default=True)
    last_order_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
