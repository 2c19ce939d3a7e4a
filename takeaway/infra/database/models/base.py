"""Declarative base, timestamp mixin and column helpers shared by all models."""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    # Fetch server-side timestamps on INSERT and UPDATE
    __mapper_args__ = {"eager_defaults": True}

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now(),
    )


class ActorMixin:
    """Who created / last touched the row (opaque user references)."""

    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    last_modified_by: Mapped[str] = mapped_column(String(64), nullable=False)


def _uuid_pk() -> Mapped[uuid.UUID]:
    return mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)


def _money(*, zero_default: bool = False) -> Mapped[Decimal]:
    if zero_default:
        return mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    return mapped_column(Numeric(10, 2), nullable=False)
