"""Guest repository."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, or_, select

from takeaway.domain.types import GuestRollup, normalize_email
from takeaway.infra.database.models.guest import Guest
from takeaway.infra.database.repositories.base import BaseRepository


class GuestRepository(BaseRepository[Guest]):
    model = Guest

    async def get_active_by_email(self, email: str) -> Optional[Guest]:
        stmt = select(Guest).where(
            Guest.email == normalize_email(email), Guest.is_deleted.is_(False),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    def _search_filter(self, search: str):
        pattern = f"%{search.strip()}%"
        return or_(
            Guest.name.ilike(pattern),
            Guest.email.ilike(pattern),
            Guest.phone.ilike(pattern),
        )

    async def list_page(
        self,
        *,
        search: Optional[str] = None,
        include_deleted: bool = False,
        skip: int = 0,
        limit: int = 20,
    ) -> List[Guest]:
        stmt = select(Guest).order_by(Guest.created_at.desc())
        if not include_deleted:
            stmt = stmt.where(Guest.is_deleted.is_(False))
        if search:
            stmt = stmt.where(self._search_filter(search))
        stmt = stmt.offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_matching(self, *, search: Optional[str] = None, include_deleted: bool = False) -> int:
        stmt = select(func.count(Guest.id))
        if not include_deleted:
            stmt = stmt.where(Guest.is_deleted.is_(False))
        if search:
            stmt = stmt.where(self._search_filter(search))
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def search(self, term: str, *, limit: int = 10) -> List[Guest]:
        stmt = (
            select(Guest)
            .where(Guest.is_deleted.is_(False), self._search_filter(term))
            .order_by(Guest.name.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_active(self) -> int:
        return await self.count_matching()

    async def apply_rollup(self, guest: Guest, rollup: GuestRollup) -> Guest:
        return await self.update(guest, {
            "total_orders": rollup.total_orders,
            "total_spent": rollup.total_spent,
            "last_order_date": rollup.last_order_date,
        })
