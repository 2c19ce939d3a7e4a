"""Enquiry ORM model: pre-order requests that can be converted into orders."""
from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import Date, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from takeaway.infra.database.models.base import ActorMixin, Base, TimestampMixin, _uuid_pk


class Enquiry(Base, TimestampMixin, ActorMixin):
    __tablename__ = "enquiries"
    __table_args__ = (
        Index("ix_enquiries_status_created", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    guest_phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    guest_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    enquiry_details: Mapped[str] = mapped_column(Text, nullable=False)
    desired_collection_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    desired_collection_time: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="new")
    # new | in_progress | converted | closed

    converted_order_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("orders.id", ondelete="SET NULL"),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
