"""FastAPI dependency providers."""
from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.config import AppSettings, load_app_settings

DEFAULT_ACTOR = "system"


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a transactional AsyncSession from the app-level session factory."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_actor(x_actor_id: Optional[str] = Header(default=None)) -> str:
    """Acting user reference from the X-Actor-Id header."""
    actor = (x_actor_id or "").strip()
    return actor[:64] or DEFAULT_ACTOR


def get_settings(request: Request) -> AppSettings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        settings = load_app_settings()
        request.app.state.settings = settings
    return settings
