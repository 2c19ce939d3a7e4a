"""Order repository."""
from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select

from takeaway.domain.pricing import to_money
from takeaway.domain.types import GuestRollup
from takeaway.infra.database.models.order import Order
from takeaway.infra.database.repositories.base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    model = Order

    async def get_for_update(self, id: UUID) -> Optional[Order]:
        """Load an order and lock its row until the surrounding transaction ends."""
        stmt = (
            select(Order)
            .where(Order.id == id)
            .with_for_update(of=Order)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def latest_order_number(self) -> Optional[str]:
        """Number of the most recently created order, deleted ones included."""
        stmt = (
            select(Order.order_number)
            .order_by(Order.created_at.desc(), Order.order_number.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_orders(
        self,
        *,
        status: Optional[str] = None,
        collection_date: Optional[date] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        guest_id: Optional[UUID] = None,
        include_deleted: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Order]:
        stmt = select(Order).order_by(
            Order.collection_date.asc(), Order.collection_time.asc(), Order.created_at.asc(),
        )
        if not include_deleted:
            stmt = stmt.where(Order.is_deleted.is_(False))
        if status:
            stmt = stmt.where(Order.status == status)
        if collection_date is not None:
            stmt = stmt.where(Order.collection_date == collection_date)
        if date_from is not None:
            stmt = stmt.where(Order.collection_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(Order.collection_date <= date_to)
        if guest_id is not None:
            stmt = stmt.where(Order.guest_id == guest_id)
        stmt = stmt.offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_guest(self, guest_id: UUID, *, skip: int = 0, limit: int = 100) -> List[Order]:
        stmt = (
            select(Order)
            .where(Order.guest_id == guest_id, Order.is_deleted.is_(False))
            .order_by(Order.collection_date.desc(), Order.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_active_for_guest(self, guest_id: UUID) -> int:
        stmt = select(func.count(Order.id)).where(
            Order.guest_id == guest_id, Order.is_deleted.is_(False),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def rollup_for_guest(self, guest_id: UUID) -> GuestRollup:
        """Count, summed total and latest collection date over the guest's live orders."""
        # Pending in-session writes must be visible to the aggregate
        await self.session.flush()
        stmt = select(
            func.count(Order.id),
            func.coalesce(func.sum(Order.total_amount), 0),
            func.max(Order.collection_date),
        ).where(Order.guest_id == guest_id, Order.is_deleted.is_(False))
        count, total, last = (await self.session.execute(stmt)).one()
        return GuestRollup(total_orders=count, total_spent=to_money(total), last_order_date=last)

    async def list_active(self) -> List[Order]:
        stmt = select(Order).where(Order.is_deleted.is_(False)).order_by(Order.created_at.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_collection_range(self, start: date, end: date) -> List[Order]:
        """Live orders whose collection date lies in [start, end]."""
        stmt = (
            select(Order)
            .where(
                Order.is_deleted.is_(False),
                Order.collection_date >= start,
                Order.collection_date <= end,
            )
            .order_by(Order.collection_date.asc(), Order.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_unlinked_with_email(self) -> List[Order]:
        """Live orders that carry a guest email but no guest reference (legacy rows)."""
        stmt = (
            select(Order)
            .where(
                Order.guest_id.is_(None),
                Order.guest_email.is_not(None),
                Order.is_deleted.is_(False),
            )
            .order_by(Order.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
