"""MenuService: read access to the menu catalog, plus the loader used by the seed script."""
from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.core.exceptions import NotFoundError
from takeaway.domain.pricing import to_money
from takeaway.domain.types import MenuCategory, parse_enum
from takeaway.infra.database.models.menu_item import MenuItem
from takeaway.infra.database.repositories.menu_item import MenuItemRepository

logger = logging.getLogger(__name__)


class MenuService:
    def __init__(self, session: AsyncSession) -> None:
        self._repo = MenuItemRepository(session)

    async def list_menu_items(
        self,
        *,
        category: Optional[str] = None,
        available: Optional[bool] = None,
    ) -> List[MenuItem]:
        if category is not None:
            category = parse_enum(MenuCategory, category, "category").value
        return await self._repo.list_items(category=category, available=available)

    async def get_menu_item(self, menu_item_id: UUID) -> MenuItem:
        item = await self._repo.get_by_id(menu_item_id)
        if item is None:
            raise NotFoundError(f"Menu item {menu_item_id} not found", details={"menu_item_id": str(menu_item_id)})
        return item

    async def price_for(self, name: str, serving_size: str) -> Decimal:
        """Current catalog price of (name, serving size)."""
        item = await self._repo.get_by_name(name)
        price = item.price_for(serving_size) if item is not None else None
        if price is None:
            raise NotFoundError(
                f"No menu price for {name!r} ({serving_size})",
                details={"name": name, "serving_size": serving_size},
            )
        return price

    async def load_catalog(self, entries: Iterable[Dict[str, Any]]) -> Tuple[int, int]:
        """Insert or refresh catalog entries by name. Returns (created, updated)."""
        created = updated = 0
        for entry in entries:
            data = {
                "name": entry["name"],
                "description": entry.get("description") or None,
                "category": parse_enum(MenuCategory, entry["category"], "category").value,
                "pricing": [
                    {"serving_size": p["serving_size"], "price": str(to_money(p["price"], "price"))}
                    for p in entry["pricing"]
                ],
                "allergens": list(entry.get("allergens", [])),
                "is_available": entry.get("is_available", True),
            }
            existing = await self._repo.get_by_name(data["name"])
            if existing is None:
                await self._repo.add(MenuItem(id=uuid.uuid4(), **data))
                created += 1
            else:
                await self._repo.update(existing, data)
                updated += 1
        logger.info("MenuService: catalog loaded, created=%d updated=%d", created, updated)
        return created, updated
