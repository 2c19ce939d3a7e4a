"""ChangeLog ORM model: immutable audit trail rows."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from takeaway.infra.database.models.base import Base, _uuid_pk


class ChangeLog(Base):
    """One audit entry. Rows are inserted once and never updated or deleted."""

    __tablename__ = "change_logs"
    __table_args__ = (
        Index("ix_change_logs_entity", "entity_type", "entity_id", "created_at"),
        Index("ix_change_logs_changed_by", "changed_by"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    entity_type: Mapped[str] = mapped_column(String(16), nullable=False)
    # order | guest | enquiry
    entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    change_type: Mapped[str] = mapped_column(String(32), nullable=False)
    changed_by: Mapped[str] = mapped_column(String(64), nullable=False)

    # [{"field": ..., "old_value": ..., "new_value": ...}, ...]
    changes: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
