"""MenuItem repository."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from takeaway.infra.database.models.menu_item import MenuItem
from takeaway.infra.database.repositories.base import BaseRepository


class MenuItemRepository(BaseRepository[MenuItem]):
    model = MenuItem

    async def list_items(
        self,
        *,
        category: Optional[str] = None,
        available: Optional[bool] = None,
    ) -> List[MenuItem]:
        stmt = select(MenuItem).order_by(MenuItem.category.asc(), MenuItem.name.asc())
        if category:
            stmt = stmt.where(MenuItem.category == category)
        if available is not None:
            stmt = stmt.where(MenuItem.is_available.is_(available))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> Optional[MenuItem]:
        stmt = select(MenuItem).where(MenuItem.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
