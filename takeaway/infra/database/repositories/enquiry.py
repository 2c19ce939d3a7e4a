"""Enquiry repository."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from takeaway.infra.database.models.enquiry import Enquiry
from takeaway.infra.database.repositories.base import BaseRepository


class EnquiryRepository(BaseRepository[Enquiry]):
    model = Enquiry

    async def list_all(
        self,
        *,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Enquiry]:
        stmt = select(Enquiry).order_by(Enquiry.created_at.desc())
        if status:
            stmt = stmt.where(Enquiry.status == status)
        stmt = stmt.offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
