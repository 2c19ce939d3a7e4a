"""ChangeLog repository: append and read only."""
from __future__ import annotations

from typing import Any, List
from uuid import UUID

from sqlalchemy import select

from takeaway.infra.database.models.change_log import ChangeLog
from takeaway.infra.database.repositories.base import BaseRepository


class ChangeLogRepository(BaseRepository[ChangeLog]):
    model = ChangeLog

    async def append(self, data: dict[str, Any]) -> ChangeLog:
        return await self.create(data)

    async def list_for_entity(
        self,
        entity_type: str,
        entity_id: UUID,
        *,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ChangeLog]:
        stmt = (
            select(ChangeLog)
            .where(ChangeLog.entity_type == entity_type, ChangeLog.entity_id == entity_id)
            .order_by(ChangeLog.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
