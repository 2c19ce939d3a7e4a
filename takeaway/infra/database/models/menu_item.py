"""MenuItem ORM model: the fixed catalog orders are placed against."""
from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from takeaway.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class MenuItem(Base, TimestampMixin):
    __tablename__ = "menu_items"
    __table_args__ = (
        Index("ix_menu_items_category_name", "category", "name"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False)

    # [{"serving_size": "Serves 6", "price": "550.00"}, ...]; prices kept as strings
    pricing: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    allergens: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def price_for(self, serving_size: str) -> Optional[Decimal]:
        """Catalog price for *serving_size*, or None if this item has no such option."""
        for option in self.pricing or []:
            if option.get("serving_size") == serving_size:
                return Decimal(str(option.get("price")))
        return None
