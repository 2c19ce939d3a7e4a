"""Generic async repository for SQLAlchemy 2.0."""
from __future__ import annotations

from typing import Any, ClassVar, Generic, List, Optional, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    model: ClassVar[type]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: UUID) -> Optional[ModelT]:
        return await self.session.get(self.model, id)  # type: ignore[return-value]

    async def get_all(self, skip: int = 0, limit: int = 100) -> List[ModelT]:
        stmt = select(self.model).offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())  # type: ignore[return-value]

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self.model)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def add(self, instance: ModelT) -> ModelT:
        """Stage an already-built instance and flush so its id and defaults are populated."""
        self.session.add(instance)
        await self.session.flush()
        return instance

    async def create(self, data: dict[str, Any]) -> ModelT:
        instance = self.model(**data)
        return await self.add(instance)

    async def update(self, instance: ModelT, data: dict[str, Any]) -> ModelT:
        for attr, value in data.items():
            setattr(instance, attr, value)
        await self.session.flush()
        return instance

    async def flush(self) -> None:
        await self.session.flush()

    async def delete(self, id: UUID) -> bool:
        instance = await self.get_by_id(id)
        if instance is None:
            return False
        await self.session.delete(instance)
        await self.session.flush()
        return True
